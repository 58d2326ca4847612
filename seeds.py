from rentcal import create_app


def ensure_car(store, car_id: str, brand: str, model: str, daily_rate: float):
    """
    Ensure a car with `car_id` exists in the catalog.
    - If exists: update brand/model/rate (idempotent).
    - If not:   create it.
    """
    car = store.cars.get(car_id)
    if car:
        car.update({"brand": brand, "model": model, "daily_rate": float(daily_rate)})
        return car_id
    return store.create_car({"car_id": car_id, "brand": brand, "model": model, "daily_rate": daily_rate})


def main():
    app = create_app()
    svc = app.extensions["rentcal"]
    store = svc.store

    # ---- Demo catalog ----
    ensure_car(store, "corolla", "Toyota", "Corolla", 45)
    ensure_car(store, "civic", "Honda", "Civic", 50)
    ensure_car(store, "model3", "Tesla", "Model 3", 120)

    # ---- One demo booking so the calendar isn't empty ----
    if not store.reservations:
        result, reservation = svc.book("demo", "corolla", svc.today(), None)
        print(f"Demo booking: {result.message} ({reservation.id if reservation else '-'})")

    store.save()
    print("Seed complete.")


if __name__ == "__main__":
    main()
