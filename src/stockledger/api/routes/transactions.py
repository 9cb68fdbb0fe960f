"""Sale settlement and return endpoints."""

from fastapi import APIRouter, Depends

from stockledger.api.dependencies import (
    get_process_return_use_case,
    get_settle_sale_use_case,
)
from stockledger.application.dto.requests import (
    ProcessReturnRequest,
    SettleTransactionRequest,
    ValidateTransactionRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    SettlementResponse,
    ValidationResultResponse,
)
from stockledger.application.use_cases import ProcessReturnUseCase, SettleSaleUseCase

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post(
    "/validate",
    response_model=ValidationResultResponse,
    responses={400: {"model": ErrorResponse}},
)
async def validate_transaction(
    request: ValidateTransactionRequest,
    use_case: SettleSaleUseCase = Depends(get_settle_sale_use_case),
) -> ValidationResultResponse:
    """
    Check stock availability before the sale is created.

    Fails with INSUFFICIENT_AVAILABLE_STOCK if any tracked product is short.
    """
    return await use_case.execute_validation(request)


@router.post("/{transaction_id}/settle", response_model=SettlementResponse)
async def settle_transaction(
    transaction_id: str,
    request: SettleTransactionRequest,
    use_case: SettleSaleUseCase = Depends(get_settle_sale_use_case),
) -> SettlementResponse:
    """
    Deduct stock for a stored sale.

    Always answers 200 once the sale exists; per-item failures are listed
    in the response. Repeating the call only applies missing items.
    """
    result = await use_case.execute(transaction_id, request)
    return use_case.to_response(result)


@router.post("/{transaction_id}/return", response_model=SettlementResponse)
async def return_transaction(
    transaction_id: str,
    request: ProcessReturnRequest,
    use_case: ProcessReturnUseCase = Depends(get_process_return_use_case),
) -> SettlementResponse:
    """Restock items returned against a sale."""
    result = await use_case.execute(transaction_id, request)
    return use_case.to_response(result)
