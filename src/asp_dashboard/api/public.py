"""Public API proxy routes.

Each route forwards to the ASP Platform /v1 API with the tenant's API key
injected server-side, and passes the JSON response through.
"""
import logging
from typing import Any, Optional

import aiohttp
from fastapi import APIRouter, File, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..asp import AspClientError
from ..schemas.platform import ConnectBankRequest, EnrichedTransaction, IngestionStatus
from ..transactions import (
    filter_transactions,
    summarize_directions,
    unique_categories,
    unique_merchants,
)
from .dependencies import ServerClientDep
from .errors import error_response


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/public", tags=["public"])

TRANSACTION_FILTERS = ("startDate", "endDate", "limit", "offset", "category", "merchant")
ENRICHED_FILTERS = TRANSACTION_FILTERS + ("subcategory", "direction", "salary", "recurring")

DEFAULT_USER_REF = "default_user"


def _forward_params(request: Request, allowed: tuple[str, ...]) -> dict[str, str]:
    """Copy only whitelisted, non-empty query parameters."""
    return {
        name: request.query_params[name]
        for name in allowed
        if request.query_params.get(name)
    }


def _optional_params(**params: Optional[str]) -> dict[str, str]:
    return {name: value for name, value in params.items() if value}


def _parse_enriched(data: Any) -> Optional[list[tuple[dict, EnrichedTransaction]]]:
    """Pair raw transaction dicts with parsed models, or None if there is no list.

    Rows that do not parse are skipped with a warning; the rest still count.
    """
    if not isinstance(data, dict) or not isinstance(data.get("transactions"), list):
        return None

    pairs = []
    for index, raw in enumerate(data["transactions"]):
        if not isinstance(raw, dict):
            logger.warning("Skipping enriched transaction #%s: not an object", index)
            continue
        try:
            pairs.append((raw, EnrichedTransaction.model_validate(raw)))
        except ValidationError as e:
            logger.warning(
                "Skipping enriched transaction #%s (id=%s): %s",
                index,
                raw.get("id"),
                e,
            )
    return pairs


@router.get("/ping", summary="Ping the ASP Platform API")
async def ping(client: ServerClientDep):
    try:
        return await client.ping()
    except AspClientError as exc:
        logger.error("Ping failed: %s", exc)
        return error_response(exc, "PING_FAILED")


@router.get("/banks", summary="List supported banks")
async def list_banks(client: ServerClientDep):
    try:
        return await client.get_banks()
    except AspClientError as exc:
        logger.error("Failed to fetch banks: %s", exc)
        return error_response(exc, "FETCH_BANKS_FAILED")


@router.get("/bank-connections", summary="List bank connections")
async def list_bank_connections(
    client: ServerClientDep,
    user_ref: Optional[str] = Query(None, alias="userRef"),
):
    try:
        return await client.get("/bank-connections", params=_optional_params(userRef=user_ref))
    except AspClientError as exc:
        logger.error("Failed to fetch bank connections: %s", exc)
        return error_response(exc, "FETCH_BANK_CONNECTIONS_FAILED")


@router.post("/bank-connections/connect", summary="Connect a bank")
async def connect_bank(payload: ConnectBankRequest, client: ServerClientDep):
    """Create a bank connection; userRef falls back to "default_user"."""
    if not payload.bank_id:
        return JSONResponse(
            {"error": "MISSING_BANK_ID"}, status_code=status.HTTP_400_BAD_REQUEST
        )

    try:
        return await client.post(
            f"/bank-connections/{payload.bank_id}/connect",
            {"userRef": payload.user_ref or DEFAULT_USER_REF},
        )
    except AspClientError as exc:
        logger.error("Failed to create bank connection for bank=%s: %s", payload.bank_id, exc)
        return error_response(exc, "BANK_CONNECTION_FAILED")


@router.get("/bank-connections/{connection_id}", summary="Get a bank connection")
async def get_bank_connection(connection_id: str, client: ServerClientDep):
    try:
        return await client.get(f"/bank-connections/{connection_id}")
    except AspClientError as exc:
        logger.error("Failed to fetch bank connection %s: %s", connection_id, exc)
        return error_response(exc, "FETCH_BANK_CONNECTION_FAILED")


@router.get("/ingestions", summary="List ingestions")
async def list_ingestions(
    client: ServerClientDep,
    user_ref: Optional[str] = Query(None, alias="userRef"),
    bank_connection_id: Optional[str] = Query(None, alias="bankConnectionId"),
):
    try:
        return await client.get(
            "/ingestions",
            params=_optional_params(userRef=user_ref, bankConnectionId=bank_connection_id),
        )
    except AspClientError as exc:
        logger.error("Failed to fetch ingestions: %s", exc)
        return error_response(exc, "FETCH_INGESTIONS_FAILED")


@router.post("/ingestions", summary="Upload a bank statement PDF")
async def create_ingestion(
    client: ServerClientDep,
    bank_connection_id: Optional[str] = Query(None, alias="bankConnectionId"),
    file: Optional[UploadFile] = File(None),
):
    """Forward the uploaded statement as multipart/form-data."""
    if not bank_connection_id:
        return JSONResponse(
            {"error": "MISSING_BANK_CONNECTION_ID"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    if file is None or not file.filename:
        return JSONResponse(
            {"error": "MISSING_FILE"}, status_code=status.HTTP_400_BAD_REQUEST
        )

    content = await file.read()
    form = aiohttp.FormData()
    form.add_field(
        name="file",
        value=content,
        filename=file.filename,
        content_type=file.content_type or "application/pdf",
    )

    try:
        result = await client.post_form_data(
            "/ingestions",
            form,
            params={"bankConnectionId": bank_connection_id},
        )
    except AspClientError as exc:
        logger.error("Failed to create ingestion: %s", exc)
        return error_response(exc, "INGESTION_FAILED")

    logger.info(
        "Created ingestion: file=%s, bytes=%s, bank_connection=%s, id=%s",
        file.filename,
        len(content),
        bank_connection_id,
        result.get("id") if isinstance(result, dict) else None,
    )
    return result


@router.get("/ingestions/{ingestion_id}", summary="Get an ingestion")
async def get_ingestion(ingestion_id: str, client: ServerClientDep):
    try:
        data = await client.get(f"/ingestions/{ingestion_id}")
    except AspClientError as exc:
        logger.error("Failed to fetch ingestion %s: %s", ingestion_id, exc)
        return error_response(exc, "FETCH_INGESTION_FAILED")

    raw_status = data.get("status") if isinstance(data, dict) else None
    try:
        ingestion_status = IngestionStatus(raw_status)
        logger.debug(
            "Ingestion %s status=%s terminal=%s",
            ingestion_id,
            ingestion_status.value,
            ingestion_status.is_terminal,
        )
    except ValueError:
        logger.warning("Ingestion %s has unknown status %r", ingestion_id, raw_status)
    return data


@router.get("/accounts", summary="List accounts")
async def list_accounts(
    client: ServerClientDep,
    user_ref: Optional[str] = Query(None, alias="userRef"),
):
    try:
        return await client.get("/accounts", params=_optional_params(userRef=user_ref))
    except AspClientError as exc:
        logger.error("Failed to fetch accounts: %s", exc)
        return error_response(exc, "FETCH_ACCOUNTS_FAILED")


@router.get("/accounts/{account_id}", summary="Get an account")
async def get_account(account_id: str, client: ServerClientDep):
    try:
        return await client.get(f"/accounts/{account_id}")
    except AspClientError as exc:
        logger.error(
            "Failed to fetch account %s: status=%s, error=%s",
            account_id,
            exc.status_code,
            exc,
        )
        return error_response(exc, "FETCH_ACCOUNT_FAILED")


@router.get("/accounts/{account_id}/snapshots", summary="Get account balance snapshots")
async def get_account_snapshots(account_id: str, client: ServerClientDep):
    try:
        return await client.get(f"/accounts/{account_id}/snapshots")
    except AspClientError as exc:
        logger.error("Failed to fetch snapshots for account %s: %s", account_id, exc)
        return error_response(exc, "FETCH_SNAPSHOTS_FAILED")


@router.get("/accounts/{account_id}/transactions", summary="List raw transactions")
async def list_transactions(account_id: str, request: Request, client: ServerClientDep):
    params = _forward_params(request, TRANSACTION_FILTERS)
    try:
        return await client.get(f"/accounts/{account_id}/transactions", params=params)
    except AspClientError as exc:
        logger.error("Failed to fetch transactions for account %s: %s", account_id, exc)
        return error_response(exc, "FETCH_TRANSACTIONS_FAILED")


@router.get(
    "/accounts/{account_id}/enriched-transactions",
    summary="List enriched transactions",
)
async def list_enriched_transactions(
    account_id: str,
    request: Request,
    client: ServerClientDep,
    search: Optional[str] = None,
):
    """Proxy enriched transactions.

    ``search`` is not sent upstream; it narrows the returned page locally
    over merchant, descriptions and category.
    """
    params = _forward_params(request, ENRICHED_FILTERS)
    endpoint = f"/accounts/{account_id}/enriched-transactions"
    logger.info("Fetching enriched transactions: %s params=%s", endpoint, params)

    try:
        data = await client.get(endpoint, params=params)
    except AspClientError as exc:
        logger.error("Failed to fetch enriched transactions for %s: %s", account_id, exc)
        return error_response(exc, "FETCH_ENRICHED_FAILED")

    pairs = _parse_enriched(data)
    if pairs is None:
        return data

    logger.info(
        "Enriched transactions for %s: %s, pagination=%s",
        account_id,
        summarize_directions(tx for _, tx in pairs),
        data.get("pagination"),
    )

    if search:
        kept = {id(tx) for tx in filter_transactions([tx for _, tx in pairs], search=search)}
        data = {**data, "transactions": [raw for raw, tx in pairs if id(tx) in kept]}
    return data


@router.get(
    "/accounts/{account_id}/enriched-transactions/facets",
    summary="Filter values for enriched transactions",
)
async def enriched_transaction_facets(
    account_id: str,
    request: Request,
    client: ServerClientDep,
):
    """Distinct categories and merchants plus an income/expense breakdown."""
    params = _forward_params(request, ENRICHED_FILTERS)
    try:
        data = await client.get(f"/accounts/{account_id}/enriched-transactions", params=params)
    except AspClientError as exc:
        logger.error("Failed to fetch enriched transactions for %s: %s", account_id, exc)
        return error_response(exc, "FETCH_ENRICHED_FAILED")

    transactions = [tx for _, tx in _parse_enriched(data) or []]
    return {
        "accountId": account_id,
        "categories": unique_categories(transactions),
        "merchants": unique_merchants(transactions),
        "summary": summarize_directions(transactions),
    }


@router.get("/api-key", summary="Get the tenant's API key metadata")
async def get_api_key_metadata(client: ServerClientDep):
    try:
        return await client.get("/api-key")
    except AspClientError as exc:
        logger.error("Failed to fetch API key metadata: %s", exc)
        return error_response(exc, "FETCH_API_KEY_METADATA_FAILED")


@router.post("/api-key/regenerate", summary="Regenerate the tenant's API key")
async def regenerate_api_key(client: ServerClientDep):
    try:
        return await client.post("/api-key/regenerate", {})
    except AspClientError as exc:
        logger.error("Failed to regenerate API key: %s", exc)
        return error_response(exc, "REGENERATE_API_KEY_FAILED")
