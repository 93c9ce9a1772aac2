"""
SQLite Persistence Example

Records launches into a SQLite database through the SQLAlchemy backend and
prints a usage analytics summary.
"""

from datetime import datetime, timedelta

from sqlalchemy import create_engine

from casual_favorites.analytics import summarize_usage
from casual_favorites.config import load_settings
from casual_favorites.models import (
    ConnectionType,
    ContextSnapshot,
    DeviceContext,
    NetworkContext,
    TimeContext,
)
from casual_favorites.storage import SQLAlchemyUsageStore


def main():
    settings = load_settings(weight_factor="medium")

    engine = create_engine("sqlite:///favorites_demo.db")
    store = SQLAlchemyUsageStore(engine)
    store.create_tables()

    start = datetime(2024, 1, 1, 7, 30)
    for day in range(5):
        for app_id, hour_offset, network_id in [
            ("news", 0, "Home"),
            ("mail", 2, "Office"),
            ("music", 11, None),
        ]:
            moment = start + timedelta(days=day, hours=hour_offset)
            snapshot = ContextSnapshot(
                timestamp=moment,
                time=TimeContext.at(moment),
                network=NetworkContext(
                    connection_type=ConnectionType.WIFI if network_id else ConnectionType.MOBILE,
                    network_id=network_id,
                ),
                device=DeviceContext(is_charging=app_id == "news"),
            )
            store.update_base_weight(app_id, settings.weight_factor_value)
            store.append_history(app_id, snapshot, max_entries=settings.max_history)

    print("Candidates:", store.list_candidates(settings.pool_size(settings.ranking_limit)))

    analytics = summarize_usage(store.list_records())
    for key, value in analytics.to_dict().items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
