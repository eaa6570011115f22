from typing import Any, Iterable, List

from botocore.exceptions import ClientError


class FakePaginator:
    def __init__(self, pages: Iterable[dict]):
        self._pages = list(pages)
        self.calls: List[dict] = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        for page in self._pages:
            yield page


class FakeClient:
    """boto3 client double.

    ``api_responses`` maps method names to a return value, a callable taking
    the call kwargs, or an exception to raise. Every call is recorded in
    ``calls`` as ``(method, kwargs)``.
    """

    def __init__(
        self,
        paginated_pages: List[dict] | None = None,
        api_responses: dict | None = None,
    ):
        self.paginator = FakePaginator(paginated_pages or [])
        self._api_responses = api_responses or {}
        self.calls: List[tuple] = []

    def get_paginator(self, method: str):
        return self.paginator

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in self._api_responses:
            raise AttributeError(name)
        resp = self._api_responses[name]

        def _call(**kwargs: Any):
            self.calls.append((name, kwargs))
            if isinstance(resp, Exception):
                raise resp
            return resp(**kwargs) if callable(resp) else resp

        return _call


def make_client_error(code: str, operation: str = "TestOperation", **extra):
    """Build a botocore ClientError carrying ``code``."""
    response = {"Error": {"Code": code, "Message": f"{code} raised"}}
    response.update(extra)
    return ClientError(response, operation)
