import datetime
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase

from showcase.models import Category
from showcase.timeline import (
    DOWN,
    UP,
    canonical_category,
    category_members,
    format_date_range,
    format_duration,
    move_entry,
    next_order,
)

from .base import make_entry, make_user


CREATED = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)


def entry(pk, type, order, created_at=None):
    created_at = created_at or CREATED + datetime.timedelta(minutes=pk)
    return SimpleNamespace(pk=pk, type=type, order=order, created_at=created_at)


class MoveEntryTests(SimpleTestCase):
    def test_example_move_c_up(self):
        a, b, c = entry(1, "WORK", 0), entry(2, "WORK", 1), entry(3, "WORK", 2)
        batch = move_entry([a, b, c], 3, UP)
        self.assertEqual(dict(batch), {1: 0, 2: 2, 3: 1})

    def test_move_up_swaps_neighbours_and_keeps_contiguous_orders(self):
        entries = [entry(pk, "EDUCATION", pk - 1) for pk in range(1, 7)]
        for i in range(1, 6):
            batch = dict(move_entry(entries, entries[i].pk, UP))
            self.assertEqual(sorted(batch.values()), list(range(6)))
            self.assertEqual(batch[entries[i].pk], i - 1)
            self.assertEqual(batch[entries[i - 1].pk], i)
            for j, other in enumerate(entries):
                if j not in (i - 1, i):
                    self.assertEqual(batch[other.pk], j)

    def test_other_categories_never_in_batch(self):
        entries = [
            entry(1, "WORK", 0),
            entry(2, "EDUCATION", 0),
            entry(3, "WORK", 1),
            entry(4, "CERTIFICATE", 1),
        ]
        batch = move_entry(entries, 3, UP)
        self.assertEqual({pk for pk, _ in batch}, {1, 3})

    def test_legacy_alias_shares_partition(self):
        entries = [entry(1, "education", 0), entry(2, "EDUCATION", 1), entry(3, "INTERNSHIP", 0)]
        batch = move_entry(entries, 2, UP)
        self.assertEqual(dict(batch), {1: 1, 2: 0})

    def test_ends_return_none(self):
        entries = [entry(1, "WORK", 0), entry(2, "WORK", 1)]
        self.assertIsNone(move_entry(entries, 1, UP))
        self.assertIsNone(move_entry(entries, 2, DOWN))

    def test_sorts_by_order_not_input_position(self):
        entries = [entry(1, "WORK", 2), entry(2, "WORK", 0), entry(3, "WORK", 1)]
        batch = move_entry(entries, 1, UP)
        self.assertEqual(dict(batch), {2: 0, 1: 1, 3: 2})

    def test_equal_orders_put_newest_entry_first(self):
        # Entry 1 was created after entry 2 even though its id is lower
        older = entry(2, "WORK", 0, created_at=CREATED)
        newer = entry(1, "WORK", 0, created_at=CREATED + datetime.timedelta(days=1))
        batch = move_entry([older, newer], 2, UP)
        self.assertEqual(dict(batch), {2: 0, 1: 1})

    def test_equal_orders_and_times_put_highest_id_first(self):
        batch = move_entry([entry(1, "WORK", 0, CREATED), entry(2, "WORK", 0, CREATED)], 1, UP)
        self.assertEqual(dict(batch), {1: 0, 2: 1})

    def test_unknown_entry(self):
        with self.assertRaises(LookupError):
            move_entry([entry(1, "WORK", 0)], 99, UP)

    def test_bad_direction(self):
        with self.assertRaises(ValueError):
            move_entry([entry(1, "WORK", 0)], 1, "left")


class CategoryTests(SimpleTestCase):
    def test_aliases_fold_to_canonical(self):
        self.assertEqual(canonical_category("education"), "EDUCATION")
        self.assertEqual(canonical_category("internship"), "INTERNSHIP")
        self.assertEqual(canonical_category(Category.WORK), "WORK")

    def test_unknown_category(self):
        with self.assertRaises(ValueError):
            canonical_category("hobby")

    def test_members_include_aliases(self):
        self.assertEqual(set(category_members("EDUCATION")), {"EDUCATION", "education"})
        self.assertEqual(set(category_members("WORK")), {"WORK"})


class NextOrderTests(TestCase):
    def setUp(self):
        self.user = make_user("carol")

    def test_empty_category_starts_at_zero(self):
        make_entry(self.user, "WORK", 9)
        self.assertEqual(next_order(self.user, "CERTIFICATE"), 0)

    def test_is_scoped_to_category(self):
        make_entry(self.user, "WORK", 0)
        make_entry(self.user, "WORK", 1)
        make_entry(self.user, "EDUCATION", 12)
        self.assertEqual(next_order(self.user, "WORK"), 2)

    def test_counts_legacy_rows(self):
        make_entry(self.user, "education", 3)
        self.assertEqual(next_order(self.user, "EDUCATION"), 4)

    def test_ignores_other_users(self):
        other = make_user("dave")
        make_entry(other, "WORK", 5)
        self.assertEqual(next_order(self.user, "WORK"), 0)


class DateFormattingTests(SimpleTestCase):
    def test_duration_years_and_months(self):
        self.assertEqual(format_duration(datetime.date(2020, 1, 15), datetime.date(2022, 5, 20)), "2 Years 4 Months")

    def test_duration_day_adjustment(self):
        self.assertEqual(format_duration(datetime.date(2021, 1, 20), datetime.date(2022, 1, 10)), "11 Months")

    def test_duration_singular(self):
        self.assertEqual(format_duration(datetime.date(2020, 1, 1), datetime.date(2021, 2, 1)), "1 Year 1 Month")

    def test_short_closed_range(self):
        self.assertEqual(format_duration(datetime.date(2020, 1, 1), datetime.date(2020, 1, 20)), "Less than 1 month")

    def test_open_range_just_started(self):
        today = datetime.date(2024, 3, 10)
        self.assertEqual(format_duration(datetime.date(2024, 3, 1), None, today=today), "Present")

    def test_inverted_or_missing(self):
        self.assertEqual(format_duration(datetime.date(2022, 1, 1), datetime.date(2021, 1, 1)), "")
        self.assertEqual(format_duration(None, None), "")

    def test_date_range(self):
        self.assertEqual(format_date_range(datetime.date(2020, 1, 5), None), "Jan 2020 - Present")
        self.assertEqual(
            format_date_range(datetime.date(2019, 9, 1), datetime.date(2023, 6, 30)), "Sep 2019 - Jun 2023"
        )
        self.assertEqual(format_date_range(None, None), "")
