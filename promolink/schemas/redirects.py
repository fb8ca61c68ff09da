from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RedirectStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    step: int = Field(..., ge=1)
    url: str
    statusCode: int
    statusText: str


class ResolveResult(BaseModel):
    success: bool
    isShortened: bool
    redirectChain: list[RedirectStep] = Field(default_factory=list)
    finalUrl: str
    error: str | None = None

    @classmethod
    def from_chain(cls, input_url: str, chain: list[RedirectStep], *, error: str | None = None) -> "ResolveResult":
        final_url = chain[-1].url if chain else input_url
        return cls(
            success=bool(chain) if error is not None else True,
            isShortened=len(chain) > 1,
            redirectChain=list(chain),
            finalUrl=final_url,
            error=error,
        )


class ResolveUrlRequest(BaseModel):
    url: str = Field(..., max_length=2048)
