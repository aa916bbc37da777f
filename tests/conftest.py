import json
from http import HTTPStatus

import pytest
import requests
from requests.adapters import BaseAdapter


def _response(request, status, body):
    response = requests.Response()
    response.status_code = status
    response.reason = HTTPStatus(status).phrase
    response.url = request.url
    response.request = request
    response.headers["Content-Type"] = "application/json"
    response._content = json.dumps(body).encode("utf-8")
    response.encoding = "utf-8"
    return response


class FakeSpotifyAdapter(BaseAdapter):
    """Answers requests from canned routes; the first route whose fragment is in the URL wins."""

    def __init__(self):
        super().__init__()
        self.routes = []
        self.requests = []

    def add(self, fragment, body, status=200):
        self.routes.append((fragment, status, body))

    def send(self, request, **kwargs):
        self.requests.append(request)
        for fragment, status, body in self.routes:
            if fragment in request.url:
                return _response(request, status, body)
        return _response(request, 404, {"error": {"status": 404, "message": "no route"}})

    def close(self):
        pass


@pytest.fixture
def spotify_transport():
    adapter = FakeSpotifyAdapter()
    session = requests.Session()
    session.mount("https://", adapter)
    yield session, adapter
    session.close()
