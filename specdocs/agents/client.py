r"""Thin client for the hosted agent API that plans and writes sections.

Example
-------
>>> from specdocs.agents.client import AgentClient
>>> client = AgentClient(api_key="key", model="openai/gpt-5.2")  # doctest: +SKIP
>>> client.call(
...     name="doc-writer", instructions="...", payload={}, output_schema={}
... )  # doctest: +SKIP
{'title': '...', 'markdown': '...'}
"""

from __future__ import annotations

import json
import logging
import typing as typ

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from specdocs.config.models import DEFAULT_API_BASE, DEFAULT_MODEL

logger = logging.getLogger(__name__)


class AgentError(RuntimeError):
    """Raised when the agent API fails or returns an unexpected payload."""


class AgentClient:
    """Issue structured-output calls against the hosted agent API.

    The client centralises authentication, retries and timeouts. Each call
    sends instructions plus a JSON input and asks for output conforming to a
    JSON schema; the structured payload is returned as a mapping.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str = DEFAULT_MODEL,
        api_base: str = DEFAULT_API_BASE,
        session: requests.Session | None = None,
        timeout: float = 300.0,
    ) -> None:
        """Initialise the client.

        Parameters
        ----------
        api_key : str
            Credential sent in the ``x-opper-api-key`` header.
        model : str, optional
            Model identifier requested for every call.
        api_base : str, optional
            Base URL of the API; ``/call`` is appended.
        session : requests.Session, optional
            Preconfigured session; a retrying session is created when omitted.
        timeout : float, optional
            Per-request timeout in seconds. Generation can be slow.
        """
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._session = session or self._build_session()
        self._session.headers.update(
            {"x-opper-api-key": api_key, "Content-Type": "application/json"}
        )

    @staticmethod
    def _build_session() -> requests.Session:
        session = requests.Session()
        retry = Retry(
            total=3,
            connect=3,
            read=2,
            backoff_factor=1.0,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=("POST",),
        )
        adapter = HTTPAdapter(max_retries=retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    def call(
        self,
        *,
        name: str,
        instructions: str,
        payload: typ.Mapping[str, typ.Any],
        output_schema: typ.Mapping[str, typ.Any],
    ) -> dict[str, typ.Any]:
        """Run one structured call and return its JSON payload.

        Raises
        ------
        AgentError
            On transport errors, non-2xx responses, or a response without a
            JSON object payload.
        """
        body = {
            "name": name,
            "instructions": instructions,
            "input": payload,
            "output_schema": output_schema,
            "model": self.model,
        }
        logger.debug("Calling agent %s with model %s", name, self.model)
        try:
            resp = self._session.post(
                f"{self.api_base}/call", data=json.dumps(body), timeout=self.timeout
            )
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as exc:
            msg = f"Agent call '{name}' failed: {exc}"
            raise AgentError(msg) from exc
        except ValueError as exc:
            msg = f"Agent call '{name}' returned invalid JSON: {exc}"
            raise AgentError(msg) from exc

        result = data.get("json_payload") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            msg = f"Agent call '{name}' returned no structured payload."
            raise AgentError(msg)
        return result

    def close(self) -> None:
        self._session.close()


__all__ = ["AgentClient", "AgentError"]
