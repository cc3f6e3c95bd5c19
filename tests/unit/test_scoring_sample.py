from kobi_gateway.domain.criteria import REVENUE_BANDS, REVENUE_FLOOR, EMPLOYEE_BANDS, EMPLOYEE_FLOOR, banded


def test_band_boundaries():
    assert banded(0, REVENUE_BANDS, REVENUE_FLOOR) == 0.2
    assert banded(10_000, REVENUE_BANDS, REVENUE_FLOOR) == 0.4
    assert banded(19_999.99, REVENUE_BANDS, REVENUE_FLOOR) == 0.4
    assert banded(20_000, REVENUE_BANDS, REVENUE_FLOOR) == 0.7
    assert banded(1_000_000, REVENUE_BANDS, REVENUE_FLOOR) == 1.0
    assert banded(4, EMPLOYEE_BANDS, EMPLOYEE_FLOOR) == 0.2
    assert banded(5, EMPLOYEE_BANDS, EMPLOYEE_FLOOR) == 0.6
    assert banded(10, EMPLOYEE_BANDS, EMPLOYEE_FLOOR) == 1.0
