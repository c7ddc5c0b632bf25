import httpx
import pytest


def make_response(status_code: int = 200, json=None, headers=None) -> httpx.Response:
    return httpx.Response(
        status_code,
        json=json if json is not None else {},
        headers=headers,
        request=httpx.Request("POST", "https://provider.test"),
    )


@pytest.fixture
def response():
    return make_response
