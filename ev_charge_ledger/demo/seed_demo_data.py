# ev_charge_ledger/demo/seed_demo_data.py

from datetime import datetime, timedelta

from ev_charge_ledger.storage.models import (
    ChargingRecord,
    ExpenseCategory,
    FixedExpenses,
    VariableExpense
)
from ev_charge_ledger.storage.repository import (
    initialize_schema,
    insert_expense,
    insert_records,
    upsert_fixed_expenses
)

UID = "demo-user"
EMAIL = "demo@example.com"


def _ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


initialize_schema()

now = datetime.now()
records = []
odometer = 15000.0
for weeks_ago in range(20, -1, -1):
    odometer += 180 + (weeks_ago % 3) * 40
    records.append(ChargingRecord.create(
        uid=UID,
        user_email=EMAIL,
        timestamp=_ms(now - timedelta(weeks=weeks_ago)),
        location="Harbour Car Park" if weeks_ago % 2 else "Home Garage",
        kwh=32.5 + weeks_ago % 4,
        total_amount=95.0 + (weeks_ago % 4) * 8,
        odometer=odometer,
        license_plate="te5la",
        rating=4
    ))

insert_records(records)
insert_expense(VariableExpense(
    uid=UID,
    user_email=EMAIL,
    timestamp=_ms(now),
    category=ExpenseCategory.TOLL,
    amount=48.0
))
upsert_fixed_expenses(FixedExpenses(
    uid=UID,
    user_email=EMAIL,
    monthly_loan=2000,
    monthly_parking=800,
    insurance_annual_cost=6000,
    license_annual_cost=1200,
    last_updated=_ms(now)
))

print("Demo charging data inserted")
