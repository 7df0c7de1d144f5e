"""PIX gateway client (CredPix-style HTTP API)."""
from decimal import Decimal
from typing import Literal, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pixbank.config import settings

APPROVED_LABEL = "Pagamento Aprovado"


class GatewayCharge(BaseModel):
    """Successful answer to a create call."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success"] = Field(alias="Status")
    external_id: str = Field(alias="IDPagamento", min_length=1)
    payable_code: str = Field(alias="CopiaeCola", min_length=1)


class GatewayCheck(BaseModel):
    """Raw answer to a check call."""

    status: str
    payment_status: str | None = None


class GatewayStatus(BaseModel):
    """Normalised payment state reported by the gateway."""

    state: Literal["approved", "pending", "not_found"]
    label: str


class PixGateway:
    """Creates and checks PIX charges against the external gateway."""

    def __init__(
        self,
        base_url: str = settings.PIX_GATEWAY_BASE_URL,
        token: str = settings.PIX_GATEWAY_TOKEN,
        timeout_seconds: int = settings.PIX_GATEWAY_TIMEOUT_SECONDS,
    ):
        """
        Initialize the gateway client.

        Args:
            base_url: Gateway API root, without trailing slash
            token: Account token sent as ``tokenuser``
            timeout_seconds: Network timeout applied to every call
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_seconds = timeout_seconds

    async def create(
        self, amount: Decimal, payer_ref: str
    ) -> Tuple[GatewayCharge | None, str | None]:
        """
        Ask the gateway for a payable code.

        Args:
            amount: Gross amount to charge
            payer_ref: Opaque reference identifying the payer (our user id)

        Returns:
            Tuple of (charge, error_message)
            - On success: (GatewayCharge, None)
            - On failure: (None, error_message)
        """
        params = {"tokenuser": self.token, "valor": str(amount), "chatidpagador": payer_ref}
        data, error = await self._get("create.php", params)
        if error is not None:
            return None, error

        try:
            return GatewayCharge.model_validate(data), None
        except ValidationError:
            return None, "Gateway refused to create the charge"

    async def check(self, external_id: str) -> Tuple[GatewayStatus | None, str | None]:
        """
        Ask the gateway for the current state of a charge.

        Returns:
            Tuple of (status, error_message)
            - On success: (GatewayStatus, None), state is approved, pending or not_found
            - On failure: (None, error_message)
        """
        params = {"tokenuser": self.token, "IDPagamento": external_id}
        data, error = await self._get("verificar.php", params)
        if error is not None:
            return None, error

        try:
            check = GatewayCheck.model_validate(data)
        except ValidationError:
            return None, "Invalid response from payment gateway"

        if check.status != "success":
            return GatewayStatus(state="not_found", label=check.status), None
        if check.payment_status is None:
            return None, "Invalid response from payment gateway"
        if check.payment_status == APPROVED_LABEL:
            return GatewayStatus(state="approved", label=check.payment_status), None
        return GatewayStatus(state="pending", label=check.payment_status), None

    async def _get(self, endpoint: str, params: dict) -> Tuple[dict | None, str | None]:
        url = f"{self.base_url}/{endpoint}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException:
            return None, "Payment gateway request timed out"
        except httpx.HTTPStatusError as e:
            return None, f"Payment gateway returned error: {e.response.status_code}"
        except httpx.RequestError as e:
            return None, f"Failed to connect to payment gateway: {str(e)}"
        except ValueError as e:
            return None, f"Failed to parse payment gateway response: {str(e)}"

        if not isinstance(data, dict):
            return None, "Invalid response from payment gateway"
        return data, None


def get_pix_gateway() -> PixGateway:
    return PixGateway()
