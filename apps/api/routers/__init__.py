"""Routers package."""

from . import (
    health,
    view,
    redirect,
    ad_spaces,
)
