from __future__ import annotations

from collections import Counter, defaultdict

from rentcal.models.store import Store
from rentcal.utils.constants import ReservationState


class AnalyticsService:
    """Aggregations for the operator dashboard."""

    @staticmethod
    def analytics(store: Store, popular_limit: int = 4):
        reservations = store.all_reservations()

        # Totals
        revenue = round(sum(r.price for r in reservations if r.state != ReservationState.CANCELLED), 2)
        states = Counter(r.state for r in reservations)

        # Reservations and revenue per car
        cnt = Counter(r.resource_id for r in reservations)
        rev = defaultdict(float)
        for r in reservations:
            if r.state != ReservationState.CANCELLED:
                rev[r.resource_id] += r.price

        reservations_by_car = []
        for cid, c in store.cars.items():
            label = f"{c.get('brand', '')} {c.get('model', '')}".strip()
            reservations_by_car.append({
                "car_id": cid,
                "label": label or cid[:6],
                "count": cnt.get(cid, 0),
                "revenue": round(rev.get(cid, 0.0), 2),
            })
        # stable sort keeps catalog order among equal counts
        reservations_by_car.sort(key=lambda x: x["count"], reverse=True)

        return {
            "totals": {
                "cars": len(store.cars),
                "reservations": len(reservations),
                "active": states.get(ReservationState.ACTIVE, 0),
                "cancelled": states.get(ReservationState.CANCELLED, 0),
                "completed": states.get(ReservationState.COMPLETED, 0),
                "revenue": revenue,
            },
            "reservations_by_car": reservations_by_car,
            "most_booked": reservations_by_car[:popular_limit],
        }
