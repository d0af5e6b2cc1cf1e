import pytest

from ibtelemetry.carnum import pad_car_num


def test_car_001():
    assert pad_car_num(1, 2) == 3001


def test_single_leading_zero():
    assert pad_car_num(7, 1) == 2007


def test_two_digit_number_with_zero():
    assert pad_car_num(42, 1) == 3042


@pytest.mark.parametrize("num", [0, 1, 9, 10, 99, 100, 999])
def test_no_zero_is_identity(num):
    assert pad_car_num(num, 0) == num


@pytest.mark.parametrize("num", [1, 9, 10, 55, 99, 100, 999])
@pytest.mark.parametrize("zero", [1, 2, 3])
def test_low_digits_keep_number(num, zero):
    assert pad_car_num(num, zero) % 1000 == num


@pytest.mark.parametrize("num", [3, 12, 345])
def test_each_extra_zero_adds_a_thousand(num):
    assert pad_car_num(num, 2) - pad_car_num(num, 1) == 1000
    assert pad_car_num(num, 3) - pad_car_num(num, 2) == 1000


def test_padded_encodings_are_distinct():
    codes = {pad_car_num(1, 0), pad_car_num(1, 1), pad_car_num(1, 2)}
    assert len(codes) == 3