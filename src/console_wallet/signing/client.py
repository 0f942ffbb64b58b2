"""Transaction signer client: one bounded call to the signing authority."""

from __future__ import annotations

import asyncio
import logging

from console_wallet.errors import SigningError, SigningErrorKind
from console_wallet.models import SignResult
from console_wallet.signing.base import Signer

logger = logging.getLogger("console_wallet.signing.client")


class TransactionSignerClient:
    """Wraps a :class:`Signer` with a timeout and structured failures.

    Payloads and signatures are never logged; only the key reference and
    the failure kind are.
    """

    def __init__(self, signer: Signer, timeout: float) -> None:
        self.signer = signer
        self.timeout = timeout

    async def sign(self, key_reference: str, payload: str) -> SignResult:
        if not payload:
            return SignResult(
                error=SigningError(SigningErrorKind.INVALID_PAYLOAD, "Empty payload")
            )
        try:
            signature = await asyncio.wait_for(
                self.signer.sign(key_reference, payload), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Signing timed out for {key_reference}")
            return SignResult(
                error=SigningError(
                    SigningErrorKind.AUTHORITY_UNREACHABLE,
                    f"Signing authority did not answer within {self.timeout}s",
                )
            )
        except SigningError as exc:
            logger.warning(f"Signing failed for {key_reference}: {exc.kind.value}")
            return SignResult(error=exc)

        logger.debug(f"Signed payload for {key_reference}")
        return SignResult(signature=signature)
