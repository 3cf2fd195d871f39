"""
Client for the external face verification service.

POST {FACE_SERVICE_URL}/verify with multipart fields `user_id` and `image`
and header X-SERVICE-KEY. The service answers
{"matched": bool, "userId": str, "confidence": float}.
"""
import logging
from typing import Optional

import httpx

from presence.core.config import settings
from presence.core.exceptions import IdentityServiceUnavailable
from presence.schemas.decision import VerificationResult

_log = logging.getLogger(__name__)


class FaceServiceClient:
    """Synchronous face service client; one instance per request is fine."""

    def __init__(
        self,
        base_url: str,
        service_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        headers = {"X-SERVICE-KEY": service_key} if service_key else {}
        self._client = httpx.Client(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def verify(
        self,
        employee_id: int,
        image: bytes,
        filename: str = "capture.jpg",
        content_type: str = "image/jpeg",
    ) -> VerificationResult:
        """
        Ask the face service whether the image belongs to employee_id.

        Raises:
            IdentityServiceUnavailable: timeout, transport error, non-200 answer
                or a body that cannot be parsed. "Not matched" is a normal result.
        """
        try:
            response = self._client.post(
                "/verify",
                data={"user_id": str(employee_id)},
                files={"image": (filename, image, content_type)},
            )
        except httpx.TimeoutException as exc:
            _log.error("Face service timed out for employee_id=%s", employee_id)
            raise IdentityServiceUnavailable(
                "Face verification service timed out",
                {"employee_id": employee_id},
            ) from exc
        except httpx.HTTPError as exc:
            _log.error("Face service unreachable for employee_id=%s: %s", employee_id, exc)
            raise IdentityServiceUnavailable(
                f"Face verification service unreachable: {exc}",
                {"employee_id": employee_id},
            ) from exc

        if response.status_code != httpx.codes.OK:
            _log.error("Face service returned %s: %s", response.status_code, response.text)
            raise IdentityServiceUnavailable(
                f"Face verification failed: {response.text}",
                {"status_code": response.status_code},
            )

        try:
            result = VerificationResult.model_validate(response.json())
        except ValueError as exc:
            raise IdentityServiceUnavailable(
                "Failed to parse face service response",
                {"body": response.text[:200]},
            ) from exc

        _log.debug(
            "Face service result: employee_id=%s matched=%s confidence=%.3f",
            employee_id, result.matched, result.confidence,
        )
        return result

    def close(self) -> None:
        self._client.close()


def get_face_client():
    """Dependency that yields a face client configured from settings"""
    client = FaceServiceClient(
        base_url=settings.FACE_SERVICE_URL,
        service_key=settings.FACE_SERVICE_KEY,
        timeout=settings.FACE_SERVICE_TIMEOUT_SECONDS,
    )
    try:
        yield client
    finally:
        client.close()
