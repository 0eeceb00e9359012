from flask import request


def client_ip() -> str:
    return request.headers.get("X-Forwarded-For", request.remote_addr) or "unknown"


def user_agent() -> str:
    return (request.headers.get("User-Agent") or "")[:255]
