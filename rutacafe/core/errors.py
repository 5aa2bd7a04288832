# rutacafe/core/errors.py
"""
Errores de dominio. Son HTTPException para que FastAPI los convierta en
{"detail": ...} sin handlers adicionales; ninguno se reintenta.
"""
from fastapi import HTTPException


class NotFound(HTTPException):
    def __init__(self, detail: str = "Recurso no encontrado"):
        super().__init__(status_code=404, detail=detail)


class Unauthorized(HTTPException):
    """El rol del actor no alcanza para la acción pedida."""

    def __init__(self, detail: str = "No autorizado"):
        super().__init__(status_code=403, detail=detail)


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=422, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=409, detail=detail)
