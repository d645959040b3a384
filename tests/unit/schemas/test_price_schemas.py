import pytest
from pydantic import ValidationError

from catalog.schemas.price import CreatePriceRecord


@pytest.mark.parametrize("amount", ["NaN", "nan", "inf", "-Infinity", float("nan"), float("inf")])
def test_create_price_record_rejects_non_finite(amount):
    with pytest.raises(ValidationError) as exc_info:
        CreatePriceRecord(product_id=1, price=amount)

    assert "finite" in str(exc_info.value)


@pytest.mark.parametrize("field", ["min_final_price", "unit_cost"])
def test_non_finite_secondary_amounts_rejected(field):
    with pytest.raises(ValidationError):
        CreatePriceRecord(product_id=1, price=1000, **{field: "NaN"})


def test_create_price_record_accepts_numeric_strings():
    record = CreatePriceRecord(product_id=1, price="12400.5", unit_cost="8000")

    assert record.price == 12400.5
    assert record.min_final_price == 12400.5
    assert record.unit_cost == 8000.0


def test_create_price_record_rejects_garbage():
    with pytest.raises(ValidationError):
        CreatePriceRecord(product_id=1, price="abc")
