from dataclasses import dataclass
from typing import Any

import aiohttp

from fedledger.communication.http.identity import HeaderIdentityResolver
from fedledger.communication.http.types import InvokeRequest
from fedledger.config.logging import get_logger
from fedledger.core.exceptions import GatewayError, error_for_kind
from fedledger.core.types import (
    EndRoundModel,
    ModelMetadata,
    OriginalModelList,
    PersonalInfo,
)
from fedledger.identity import ClientIdentity


@dataclass(slots=True, frozen=True)
class ClientEndpoints:
    """Client endpoint configuration."""

    invoke: str = "/operations/{operation}"
    get_status: str = "/status"


class LedgerHTTPClient:
    """HTTP client for invoking contract operations through the gateway."""

    def __init__(
        self,
        server_url: str,
        identity: ClientIdentity,
        endpoints: ClientEndpoints | None = None,
        timeout: int = 30,
    ) -> None:
        self._server_url = server_url.rstrip("/")
        self._identity = identity
        self._endpoints = endpoints or ClientEndpoints()
        self._logger = get_logger(
            "fedledger.client", context={"client": identity.id}
        )
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "LedgerHTTPClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout)
            )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def _get_url(self, endpoint: str) -> str:
        return f"{self._server_url}{endpoint}"

    async def invoke(self, operation: str, *args: Any) -> Any:
        """Invoke an operation; gateway errors are raised as LedgerError."""
        if self._session is None:
            raise GatewayError("Client session not initialized")

        url = self._get_url(
            self._endpoints.invoke.format(operation=operation)
        )
        headers = HeaderIdentityResolver.headers_for(self._identity)
        payload: InvokeRequest = {"args": list(args)}
        try:
            async with self._session.post(
                url, json=payload, headers=headers
            ) as response:
                data = await response.json()
        except aiohttp.ClientError as e:
            raise GatewayError(f"HTTP error: {str(e)}")

        if not isinstance(data, dict) or data.get("status") != "success":
            data = data if isinstance(data, dict) else {}
            error = error_for_kind(
                data.get("kind", ""),
                data.get("message", "Unknown error"),
                data.get("details"),
            )
            self._logger.warning(
                f"{operation} failed: {error.kind.value} {error.message}"
            )
            raise error

        self._logger.debug(f"{operation} completed")
        return data.get("result")

    async def get_status(self) -> dict[str, Any]:
        if self._session is None:
            raise GatewayError("Client session not initialized")

        try:
            url = self._get_url(self._endpoints.get_status)
            async with self._session.get(url) as response:
                if response.status != 200:
                    raise GatewayError(
                        f"Failed to fetch gateway status: {response.status}"
                    )
                return await response.json()
        except aiohttp.ClientError as e:
            raise GatewayError(f"HTTP error: {str(e)}")

    # Administrator

    async def create_model_metadata(
        self,
        model_id: str,
        name: str,
        clients_per_round: int,
        training_rounds: int,
    ) -> ModelMetadata:
        result = await self.invoke(
            "createModelMetadata",
            model_id,
            name,
            clients_per_round,
            training_rounds,
        )
        return ModelMetadata.model_validate(result)

    async def start_training(self, model_id: str) -> ModelMetadata:
        result = await self.invoke("startTraining", model_id)
        return ModelMetadata.model_validate(result)

    async def get_model_metadata(self, model_id: str) -> ModelMetadata:
        result = await self.invoke("getModelMetadata", model_id)
        return ModelMetadata.model_validate(result)

    async def get_trained_model(self, model_id: str) -> EndRoundModel:
        result = await self.invoke("getTrainedModel", model_id)
        return EndRoundModel.model_validate(result)

    # Trainer

    async def add_original_model(
        self, model_id: str, weights: str, dataset_size: int
    ) -> ModelMetadata:
        result = await self.invoke(
            "addOriginalModel", model_id, weights, dataset_size
        )
        return ModelMetadata.model_validate(result)

    async def get_end_round_model(self, model_id: str) -> EndRoundModel:
        result = await self.invoke("getEndRoundModel", model_id)
        return EndRoundModel.model_validate(result)

    # Aggregator

    async def get_number_of_received_original_models(
        self, model_id: str
    ) -> int:
        return await self.invoke(
            "getNumberOfReceivedOriginalModels", model_id
        )

    async def get_number_of_required_original_models(
        self, model_id: str
    ) -> int:
        return await self.invoke(
            "getNumberOfRequiredOriginalModels", model_id
        )

    async def check_all_original_models_received(
        self, model_id: str
    ) -> bool:
        return await self.invoke("checkAllOriginalModelsReceived", model_id)

    async def get_original_model_list(
        self, model_id: str, round_number: int
    ) -> OriginalModelList:
        result = await self.invoke(
            "getOriginalModelList", model_id, round_number
        )
        return OriginalModelList.model_validate(result)

    async def get_original_model_list_for_current_round(
        self, model_id: str
    ) -> OriginalModelList:
        result = await self.invoke(
            "getOriginalModelListForCurrentRound", model_id
        )
        return OriginalModelList.model_validate(result)

    async def add_end_round_model(
        self, model_id: str, weights: str
    ) -> ModelMetadata:
        result = await self.invoke("addEndRoundModel", model_id, weights)
        return ModelMetadata.model_validate(result)

    # General

    async def get_personal_info(self) -> PersonalInfo:
        result = await self.invoke("getPersonalInfo")
        return PersonalInfo.model_validate(result)

    async def get_role(self) -> str:
        return await self.invoke("getRole")

    async def check_has_fl_admin_attribute(self) -> bool:
        return await self.invoke("checkHasFlAdminAttribute")

    async def check_has_trainer_attribute(self) -> bool:
        return await self.invoke("checkHasTrainerAttribute")

    async def check_has_lead_aggregator_attribute(self) -> bool:
        return await self.invoke("checkHasLeadAggregatorAttribute")
