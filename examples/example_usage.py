"""Example: drive the service layer directly, without Flask.

Controllers are thin; the daily form rules live in the services.
"""

import importlib
import logging

from config import get_settings_module

from src.performance_tracker.performance_tracker.container import build_container


def main():
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    view = container.daily_form_service.today_view(employee_id=2)
    print(view.form.form_date, view.decision.state.value, view.window.message)

    board = container.leaderboard_service.get_leaderboard(days=7)
    for entry in board.entries:
        print(entry.name, entry.total_bonus, entry.average_score)
    print("source:", board.meta.source_tier.value)


if __name__ == "__main__":
    main()
