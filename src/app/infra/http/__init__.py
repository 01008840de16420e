"""Cliente HTTP compartilhado da camada infra."""

from app.infra.http.client import HttpClient, HttpClientConfig

__all__ = ["HttpClient", "HttpClientConfig"]
