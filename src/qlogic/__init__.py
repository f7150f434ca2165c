"""
Questionnaire Logic Model (qlogic) Package

Declarative questionnaire structures and the engine that evaluates them
against a flat response store: visibility, derived values, progress and
validation.

ARCHITECTURAL GUARANTEE:
------------------------
The evaluation core contains ZERO knowledge of:
    - Rendering or form widgets
    - Databases or HTTP
    - Authentication or user sessions

Storage is reached only through `qlogic.store`.
Evaluation never mutates the caller's response store.
"""

__version__ = "0.1.0"
