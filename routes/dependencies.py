# routes/dependencies.py
from fastapi import Request


def get_db(request: Request):
    return request.app.state.db


def get_storage(request: Request):
    return request.app.state.storage


def get_tokens(request: Request):
    return request.app.state.tokens
