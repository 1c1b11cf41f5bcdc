"""Authentication request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class NonceRequest(BaseModel):
    """Request for a sign-in challenge."""

    address: str | None = Field(None, description="0x-prefixed 20-byte hex wallet address")


class ChallengeResponse(BaseModel):
    """Sign-in message and the nonce it embeds."""

    message: str = Field(..., description="Text the wallet must sign")
    nonce: str = Field(..., description="Single-use 256-bit nonce, hex encoded")
    timestamp: int = Field(..., description="Issue time in epoch milliseconds")
    expires_at: int = Field(
        ...,
        alias="expiresAt",
        description="Expiry time in epoch milliseconds",
    )

    model_config = ConfigDict(populate_by_name=True)


class VerifyRequest(BaseModel):
    """Signed challenge submitted in exchange for a session token."""

    address: str | None = Field(None, description="Wallet address that signed the message")
    signature: str | None = Field(None, description="0x-prefixed 65-byte hex signature")
    message: str | None = Field(None, description="Exact message that was signed")


class VerifyResponse(BaseModel):
    """Session token returned after a successful proof."""

    success: bool = Field(True, description="Always true on success")
    token: str = Field(..., description="Bearer session token")
    address: str = Field(..., description="Normalized (lowercase) wallet address")
    expires_in: str = Field(..., alias="expiresIn", description="Token lifetime expression")

    model_config = ConfigDict(populate_by_name=True)


class SessionResponse(BaseModel):
    """Identity behind a valid bearer token."""

    address: str
    message: str = "Authenticated"


class HealthResponse(BaseModel):
    """Liveness probe payload."""

    status: str
    timestamp: int = Field(..., description="Server time in epoch milliseconds")


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str = Field(..., description="Human readable message")
    code: str = Field(..., description="Stable machine readable error kind")
