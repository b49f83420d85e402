"""HTTP delivery of usage reports."""

from __future__ import annotations

import asyncio
import os

import requests

from gql_usage.config import DEFAULT_CLIENT_NAME, DEFAULT_ENDPOINT, PACKAGE_VERSION
from gql_usage.formats.usage_report import Report
from gql_usage.recorder.recorder import SendFn


def create_hive_send_fn(
    token: str | None = None,
    *,
    endpoint: str | None = None,
    client_name: str | None = None,
    client_version: str | None = None,
    timeout: float = 10.0,
) -> SendFn:
    """Create a send function posting reports to a usage ingestion endpoint.

    The token falls back to ``GQL_USAGE_TOKEN``.  The blocking POST runs in
    a worker thread; non-2xx responses raise ``requests.HTTPError``.
    """
    token = token or os.environ.get("GQL_USAGE_TOKEN")
    if not token:
        raise ValueError("A usage token is required: pass token= or set GQL_USAGE_TOKEN")

    url = endpoint or DEFAULT_ENDPOINT
    name = client_name or DEFAULT_CLIENT_NAME
    version = client_version or PACKAGE_VERSION

    session = requests.Session()
    session.headers.update(
        {
            "accept": "application/json",
            "content-type": "application/json",
            "Authorization": f"Bearer {token}",
            "User-Agent": f"{name}/{version}",
            "graphql-client-name": name,
            "graphql-client-version": version,
        }
    )

    async def send(report: Report) -> None:
        response = await asyncio.to_thread(
            session.post, url, data=report.to_json(), timeout=timeout
        )
        response.raise_for_status()

    return send
