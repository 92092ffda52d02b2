from __future__ import annotations

from typing import Any

import httpx


class VertexProvider:
    """Calls the Vertex AI `generateContent` REST endpoint for publisher models."""

    def __init__(
        self,
        project_id: str,
        location: str = "us-central1",
        timeout_s: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        if not project_id:
            raise RuntimeError("PROJECT_ID is missing")
        self._project_id = project_id
        self._location = location
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    def endpoint(self, model: str) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/projects/{self._project_id}"
            f"/locations/{self._location}/publishers/google/models/{model}:generateContent"
        )

    async def generate_content(
        self,
        model: str,
        request: dict[str, Any],
        *,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        response = await self._client.post(self.endpoint(model), json=request, headers=headers)
        response.raise_for_status()
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()
