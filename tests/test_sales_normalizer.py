from __future__ import annotations

import unittest
from datetime import date

from app.mappers.sales_normalizer import (
    FIELD_ALIASES,
    SalesNormalizer,
    parse_number,
)


class TestParseNumber(unittest.TestCase):
    def test_parses_numeric_strings_and_numbers(self) -> None:
        self.assertEqual(parse_number("100"), 100.0)
        self.assertEqual(parse_number(" 12.5 "), 12.5)
        self.assertEqual(parse_number(7), 7.0)

    def test_strips_currency_and_thousands_separators(self) -> None:
        self.assertEqual(parse_number("$1,250.50"), 1250.5)
        self.assertEqual(parse_number("€ 99"), 99.0)
        self.assertEqual(parse_number("12,345,678"), 12345678.0)

    def test_comma_decimal_mark(self) -> None:
        self.assertEqual(parse_number("12,50"), 12.5)
        self.assertEqual(parse_number("1.234,56"), 1234.56)
        self.assertEqual(parse_number("€ 0,99"), 0.99)
        self.assertIsNone(parse_number("1,2,3"))

    def test_spanish_amounts_keep_their_value(self) -> None:
        sale = SalesNormalizer().normalize_row({"total": "1.234,56", "precio": "12,50"})

        self.assertEqual(sale.total_amount, 1234.56)
        self.assertEqual(sale.unit_price, 12.5)

    def test_returns_none_for_unparseable_values(self) -> None:
        for value in (None, "", "abc", True, float("nan"), float("inf")):
            with self.subTest(value=value):
                self.assertIsNone(parse_number(value))


class TestSalesNormalizer(unittest.TestCase):
    def setUp(self) -> None:
        self.normalizer = SalesNormalizer(today=lambda: date(2024, 5, 20))

    def test_bilingual_rows_normalize_to_same_shape(self) -> None:
        rows = [
            {"fecha": "2024-01-01", "producto": "Widget", "total": "100"},
            {"date": "2024-01-02", "product": "Widget", "total_amount": 50},
        ]

        first, second = self.normalizer.normalize_rows(rows)

        self.assertEqual(first.product_name, "Widget")
        self.assertEqual(second.product_name, "Widget")
        self.assertEqual(first.total_amount, 100.0)
        self.assertEqual(second.total_amount, 50.0)
        self.assertEqual(first.date, "2024-01-01")
        self.assertEqual(second.date, "2024-01-02")

    def test_missing_numeric_fields_use_defaults(self) -> None:
        sale = self.normalizer.normalize_row({"product_name": "Widget"})

        self.assertEqual(sale.quantity, 1)
        self.assertEqual(sale.unit_price, 0.0)
        self.assertEqual(sale.total_amount, 0.0)

    def test_unparseable_numbers_fall_back_to_defaults(self) -> None:
        sale = self.normalizer.normalize_row(
            {"cantidad": "many", "precio": "n/a", "Total": "-", "Product": "Gadget"}
        )

        self.assertEqual(sale.quantity, 1)
        self.assertEqual(sale.unit_price, 0.0)
        self.assertEqual(sale.total_amount, 0.0)

    def test_negative_numbers_fall_back_to_defaults(self) -> None:
        sale = self.normalizer.normalize_row({"quantity": "-3", "price": -2, "amount": "-10"})

        self.assertEqual(sale.quantity, 1)
        self.assertEqual(sale.unit_price, 0.0)
        self.assertEqual(sale.total_amount, 0.0)

    def test_quantity_is_truncated_to_integer(self) -> None:
        sale = self.normalizer.normalize_row({"Cantidad": "3.9"})
        self.assertEqual(sale.quantity, 3)

    def test_out_of_range_quantity_falls_back_to_default(self) -> None:
        sale = self.normalizer.normalize_row({"quantity": "1e30", "product": "x" * 300})

        self.assertEqual(sale.quantity, 1)
        self.assertEqual(len(sale.product_name), 300)

    def test_first_present_alias_wins_even_when_empty(self) -> None:
        sale = self.normalizer.normalize_row({"total_amount": "", "total": "75", "Amount": "80"})
        self.assertEqual(sale.total_amount, 0.0)

    def test_alias_precedence_follows_declared_order(self) -> None:
        sale = self.normalizer.normalize_row({"Amount": "80", "total": "75"})
        self.assertEqual(sale.total_amount, 75.0)

        self.assertEqual(
            FIELD_ALIASES["total_amount"],
            ("total_amount", "total", "Total", "amount", "Amount"),
        )

    def test_aliases_are_case_sensitive(self) -> None:
        sale = self.normalizer.normalize_row({"TOTAL": "75", "PRODUCT": "Widget"})

        self.assertEqual(sale.total_amount, 0.0)
        self.assertEqual(sale.product_name, "unnamed")

    def test_optional_text_fields_stay_none(self) -> None:
        sale = self.normalizer.normalize_row({"producto": "Widget", "categoria": "  ", "Region": ""})

        self.assertIsNone(sale.category)
        self.assertIsNone(sale.region)
        self.assertIsNone(sale.salesperson)

    def test_text_fields_resolve_spanish_aliases(self) -> None:
        sale = self.normalizer.normalize_row(
            {"Categoria": "Hogar", "region": "Sur", "Vendedor": "Luis"}
        )

        self.assertEqual(sale.category, "Hogar")
        self.assertEqual(sale.region, "Sur")
        self.assertEqual(sale.salesperson, "Luis")

    def test_missing_date_defaults_to_today(self) -> None:
        sale = self.normalizer.normalize_row({"producto": "Widget"})
        self.assertEqual(sale.date, "2024-05-20")

    def test_malformed_date_is_passed_through(self) -> None:
        sale = self.normalizer.normalize_row({"Fecha": "15/01/2024"})
        self.assertEqual(sale.date, "15/01/2024")

    def test_all_defaults_row_never_fails(self) -> None:
        sale = self.normalizer.normalize_row({"unexpected": "value"})

        self.assertEqual(sale.product_name, "unnamed")
        self.assertEqual(sale.date, "2024-05-20")
        self.assertIsNone(sale.uploaded_by)

    def test_normalize_rows_preserves_order_and_stamps_uploader(self) -> None:
        rows = [{"product": name} for name in ("a", "b", "c")]

        sales = self.normalizer.normalize_rows(rows, uploaded_by="user-7")

        self.assertEqual([sale.product_name for sale in sales], ["a", "b", "c"])
        self.assertTrue(all(sale.uploaded_by == "user-7" for sale in sales))


if __name__ == "__main__":
    unittest.main()
