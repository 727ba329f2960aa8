"""
Grading policy: the weights and letter scale used to turn exam and
attendance percentages into a final grade.

Policies are immutable values. The calculator receives one explicitly
(or builds it from PlatformSetting), so alternate scales can be used
without touching module state.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

TWO_PLACES = Decimal("0.01")


def quantize(value):
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class GradeBand:
    letter: str
    minimum: Decimal
    gpa: Decimal


DEFAULT_SCALE = (
    GradeBand("A", Decimal("93"), Decimal("4.0")),
    GradeBand("A-", Decimal("90"), Decimal("3.7")),
    GradeBand("B+", Decimal("87"), Decimal("3.3")),
    GradeBand("B", Decimal("83"), Decimal("3.0")),
    GradeBand("B-", Decimal("80"), Decimal("2.7")),
    GradeBand("C+", Decimal("77"), Decimal("2.3")),
    GradeBand("C", Decimal("73"), Decimal("2.0")),
    GradeBand("C-", Decimal("70"), Decimal("1.7")),
    GradeBand("D", Decimal("60"), Decimal("1.0")),
    GradeBand("F", Decimal("0"), Decimal("0.0")),
)


@dataclass(frozen=True)
class GradingPolicy:
    exam_weight: Decimal = Decimal("0.70")
    attendance_weight: Decimal = Decimal("0.30")
    pass_percentage: Decimal = Decimal("75")
    # Highest band first
    scale: tuple = field(default=DEFAULT_SCALE)

    def final_grade(self, exam_average, attendance_percentage):
        return quantize(
            Decimal(exam_average) * self.exam_weight +
            Decimal(attendance_percentage) * self.attendance_weight
        )

    def letter_for(self, percentage):
        """Returns (letter, gpa) for the first band whose minimum the percentage reaches."""
        percentage = Decimal(percentage)
        for band in self.scale:
            if percentage >= band.minimum:
                return band.letter, band.gpa
        lowest = self.scale[-1]
        return lowest.letter, lowest.gpa

    def passes(self, percentage):
        return percentage is not None and Decimal(percentage) >= self.pass_percentage


DEFAULT_POLICY = GradingPolicy()
