"""Quiz domain services: question sampling, adaptive difficulty, solo
quizzes, battles, and leaderboards.

Blueprints in ``trivia.api`` import from here, keeping transport concerns
separated from the scoring rules and the battle state machine.
"""
