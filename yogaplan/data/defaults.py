"""Built-in cards and the default session shipped with the app.

The default session is never persisted; it is rebuilt from these constants
every time the player opens it.
"""

from __future__ import annotations

from typing import List

from ..session.items import DEFAULT_SESSION_ID, Exercise, YogaSession

DEFAULT_EXERCISES: List[Exercise] = [
    Exercise(
        id="1",
        title="Sonnengruß",
        description=(
            "Eine fließende Abfolge von Positionen, die den gesamten Körper "
            "aufwärmt und die Energie zum Fließen bringt."
        ),
        category="Stehübungen",
        tags=["aufwärmen", "flow", "ganzkörper"],
        duration_minutes=5,
        icon="☀️",
    ),
    Exercise(
        id="2",
        title="Krieger I (Virabhadrasana I)",
        description=(
            "Stehende Position zur Stärkung der Beine und Öffnung der Hüften. "
            "Diese Asana fördert Kraft und Standfestigkeit."
        ),
        category="Stehübungen",
        tags=["kraft", "balance", "beine"],
        duration_minutes=4,
        icon="⚔️",
    ),
    Exercise(
        id="3",
        title="Herabschauender Hund (Adho Mukha Svanasana)",
        description=(
            "Eine der wichtigsten Yoga-Positionen, die den gesamten Körper dehnt "
            "und stärkt. Beruhigt den Geist und energetisiert den Körper."
        ),
        category="Stehübungen",
        tags=["dehnung", "kraft", "umkehrhaltung"],
        duration_minutes=3,
        icon="🐕",
    ),
    Exercise(
        id="4",
        title="Kobra (Bhujangasana)",
        description=(
            "Liegende Rückbeuge zur Stärkung des unteren Rückens und Öffnung des "
            "Herzraums. Verbessert die Flexibilität der Wirbelsäule."
        ),
        category="Liegeübungen",
        tags=["rücken", "kraft", "rückbeuge"],
        duration_minutes=3,
        icon="🐍",
    ),
    Exercise(
        id="5",
        title="Shavasana (Totenstellung)",
        description=(
            "Die wichtigste Entspannungsposition zum Abschluss der Praxis. "
            "Ermöglicht dem Körper, die Übungen zu integrieren und tiefe "
            "Entspannung zu erfahren."
        ),
        category="Liegeübungen",
        tags=["entspannung", "meditation", "abschluss"],
        duration_minutes=5,
        icon="🧘",
    ),
]


def default_session() -> YogaSession:
    """Fresh copy of the built-in session (callers may mutate it)."""
    return YogaSession(
        id=DEFAULT_SESSION_ID,
        title="Basis Yoga Flow",
        description=(
            "Eine ausgewogene Yoga-Session für Anfänger und Fortgeschrittene. "
            "Perfekt für einen energetischen Start in den Tag oder eine "
            "entspannende Pause."
        ),
        story=(
            "Beginne deine Reise mit dem belebenden Sonnengruß, finde Stärke im "
            "Krieger, dehne und stärke dich im herabschauenden Hund, öffne dein "
            "Herz in der Kobra und finde tiefe Entspannung in Shavasana."
        ),
        duration_minutes=20,
        exercises=["1", "2", "3", "4", "5"],
        category="",
        level="Alle Levels",
    )


DEFAULT_EXERCISE_SET = {
    "id": "exercise-set-default",
    "name": "Yoga Starter Set",
    "description": "A complete collection of all available yoga exercises",
    "exerciseIds": ["1", "2", "3", "4", "5", "6", "7"],
    "isDefault": True,
}

SESSION_CATEGORIES = ["Morgen", "Abend", "Kraft", "Entspannung", "Balance"]
SESSION_LEVELS = ["Anfänger", "Fortgeschritten", "Alle Levels"]
EXERCISE_CATEGORIES = ["Stehübungen", "Liegeübungen", "Sitzübungen", "Gleichgewicht", "Entspannung"]
