from fastapi import APIRouter, HTTPException, Request
from pydantic import EmailStr, TypeAdapter, ValidationError
from starlette import status

from planty.api.dependencies.current_user import CurrentUserDep
from planty.api.dependencies.logger import LoggerDep
from planty.api.dependencies.store import CredentialsDep, StoreDep
from planty.core.exceptions import EmailInUse, StorageError
from planty.models.api_key import AddEmailRequest, GenerateKeyRequest, GenerateKeyResponse
from planty.models.success_response import SuccessResponse
from planty.models.user_info import MeResponse, UserInfo

router = APIRouter(tags=["users"])

_email_adapter = TypeAdapter(EmailStr)

def _validate_email(raw: str | None) -> str:
    try:
        return _email_adapter.validate_python(raw)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Valid email required",
        )


@router.post("/generate-key")
async def generate_key(
        credentials: CredentialsDep,
        logger: LoggerDep,
        body: GenerateKeyRequest | None = None,
) -> GenerateKeyResponse:
    email = _validate_email(body.email) if body is not None and body.email is not None else None

    try:
        issued = credentials.create_identity(email)
    except EmailInUse:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already in use",
        )
    except StorageError as e:
        logger.error(f"Error generating key: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate API key",
        )

    return GenerateKeyResponse(api_key=issued.api_key, user_id=issued.user_id)


@router.get("/me")
async def me(current_user: CurrentUserDep, store: StoreDep, logger: LoggerDep) -> MeResponse:
    try:
        api_keys = store.list_api_keys(current_user.id)
    except StorageError as e:
        logger.error(f"Error fetching user info: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user info",
        )

    return MeResponse(
        user=UserInfo.model_validate(current_user),
        api_keys=api_keys,
    )


@router.post("/add-email")
async def add_email(
        body: AddEmailRequest,
        current_user: CurrentUserDep,
        store: StoreDep,
        logger: LoggerDep,
) -> SuccessResponse:
    email = _validate_email(body.email)

    try:
        added = store.add_email(current_user.id, email)
    except StorageError as e:
        logger.error(f"Error adding email: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add email",
        )

    # the user already has an email, or somebody else uses this one
    if not added:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already set or in use",
        )

    return SuccessResponse(message="Email added successfully")


@router.post("/revoke-key")
async def revoke_key(
        request: Request,
        current_user: CurrentUserDep,
        credentials: CredentialsDep,
        logger: LoggerDep,
) -> SuccessResponse:
    # the key used for this very request
    token = request.headers["authorization"][len("Bearer "):].strip()

    try:
        credentials.revoke(token)
    except StorageError as e:
        logger.error(f"Error revoking key: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to revoke API key",
        )

    logger.info(f"api key {token[:credentials.display_length]}... revoked by user {current_user.id}")
    return SuccessResponse(message="API key revoked")
