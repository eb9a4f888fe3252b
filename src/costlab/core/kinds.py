"""
CostLab row kind and formula constants.
"""


class RowKind:
    DATA = "data"  # Plain numeric row, one value per month
    HEADER = "header"  # Presentation label, no numbers
    COMPUTED = "computed"  # Derived subtotal or grand total

    @classmethod
    def all_kinds(cls) -> list[str]:
        """Enumerate all row kinds (for parsing and docs)."""
        return [cls.DATA, cls.HEADER, cls.COMPUTED]


class Formula:
    SUBTOTAL = "subtotal"  # Sum of an explicit target list
    GRAND_TOTAL = "grandtotal"  # Sum of every data row

    @classmethod
    def all_formulas(cls) -> list[str]:
        """Enumerate all computed-row formulas."""
        return [cls.SUBTOTAL, cls.GRAND_TOTAL]
