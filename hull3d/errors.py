"""Помилки побудови оболонки. Усі — ValueError, як і решта перевірок входу."""

from __future__ import annotations


class HullError(ValueError):
    """Базова помилка: оболонку побудувати не вдалося."""


class InsufficientPoints(HullError):
    """Менше 4 точок."""


class DegenerateSeed(HullError):
    """Перші три точки (у порядку z, x, y) колінеарні."""


class UnresolvedAdjacency(HullError):
    """Після фіналізації лишилось посилання на мертву / невизначену грань."""


class IllegalTransition(HullError):
    """Недозволений перехід стану грані (напр. оживлення DEAD)."""
