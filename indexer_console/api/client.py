"""
Async REST client for the indexer service

Every method returns parsed models or raises an error from core.errors.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from indexer_console.core.config import settings
from indexer_console.core.errors import (
    TransientNetworkFailure,
    Unauthorized,
    UnexpectedResponse,
    error_for_status,
)
from indexer_console.models.auth import LoginRequest, TokenResponse
from indexer_console.models.process import IndexerProcess, LogResponse, StartIndexerRequest
from indexer_console.models.search import SearchResultPage

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_detail(response: httpx.Response) -> Optional[str]:
    """Pull the FastAPI 'detail' message out of an error response"""
    try:
        data = response.json()
    except ValueError:
        return None
    
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("message")
    else:
        detail = data
    
    if detail is None:
        return None
    return detail if isinstance(detail, str) else str(detail)


class ApiClient:
    """
    Thin async client for the indexer service
    
    The session store supplies the bearer token and is told about 401s.
    """
    
    def __init__(self, base_url: Optional[str] = None, session=None,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.session = session
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT,
            transport=transport,
        )
    
    async def __aenter__(self) -> "ApiClient":
        return self
    
    async def __aexit__(self, *exc_info):
        await self.aclose()
    
    async def aclose(self):
        await self._client.aclose()
    
    def _auth_headers(self) -> Dict[str, str]:
        token = self.session.token if self.session is not None else None
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}
    
    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, headers=self._auth_headers(), **kwargs)
        except httpx.HTTPError as e:
            raise TransientNetworkFailure(f"{method} {path} failed: {e.__class__.__name__}: {e}") from e
        
        if response.status_code >= 400:
            error = error_for_status(response.status_code, extract_detail(response))
            if isinstance(error, Unauthorized) and self.session is not None:
                self.session.invalidate()
            raise error
        
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UnexpectedResponse(f"{method} {path} returned invalid JSON") from e
    
    @staticmethod
    def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
        """Build a response model, turning a body of the wrong shape into UnexpectedResponse"""
        if not isinstance(data, dict):
            raise UnexpectedResponse(f"{path}: expected an object, got {data.__class__.__name__}")
        try:
            return model(**data)
        except ValidationError as e:
            raise UnexpectedResponse(f"{path}: unexpected response shape ({e.error_count()} invalid fields)") from e
    
    # ---------- Auth ----------
    
    async def login(self, username: str, password: str) -> TokenResponse:
        data = await self._request("POST", "/api/auth/login",
                                   json=LoginRequest(username=username, password=password).model_dump())
        return self._parse(TokenResponse, data, "/api/auth/login")
    
    # ---------- Indexers ----------
    
    async def list_indexers(self, status: Optional[str] = None,
                            type: Optional[str] = None) -> List[IndexerProcess]:
        """GET /api/indexers with optional status/type filters"""
        params = {}
        if status:
            params["status"] = status
        if type:
            params["type"] = type
        data = await self._request("GET", "/api/indexers", params=params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise UnexpectedResponse(f"/api/indexers: expected a list, got {data.__class__.__name__}")
        return [self._parse(IndexerProcess, item, "/api/indexers") for item in data]
    
    async def get_indexer(self, process_id: int) -> IndexerProcess:
        path = f"/api/indexers/{process_id}"
        data = await self._request("GET", path)
        return self._parse(IndexerProcess, data, path)
    
    async def start_indexer(self, request: StartIndexerRequest) -> IndexerProcess:
        data = await self._request("POST", "/api/indexers/start", json=request.model_dump())
        return self._parse(IndexerProcess, data, "/api/indexers/start")
    
    async def stop_indexer(self, process_id: int) -> Dict:
        return await self._request("POST", f"/api/indexers/{process_id}/stop")
    
    async def get_logs(self, process_id: int, since: Optional[str] = None) -> LogResponse:
        """GET /api/indexers/{id}/logs, 'since' only when a cursor exists"""
        params = {"since": since} if since else {}
        path = f"/api/indexers/{process_id}/logs"
        data = await self._request("GET", path, params=params)
        return self._parse(LogResponse, data if data is not None else {}, path)
    
    # ---------- Search ----------
    
    async def search(self, payload: Dict[str, Any]) -> SearchResultPage:
        data = await self._request("POST", "/api/search-licitaciones", json=payload)
        return self._parse(SearchResultPage, data, "/api/search-licitaciones")
