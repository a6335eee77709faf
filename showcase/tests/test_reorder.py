from unittest import mock

from django.db import DatabaseError
from django.urls import reverse

from showcase import timeline
from showcase.models import TimelineEntry

from .base import ShowcaseAPITestCase, make_entry

REORDER_URL = reverse("education-reorder")


class ReorderEndpointTests(ShowcaseAPITestCase):
    def setUp(self):
        super().setUp()
        self.a = make_entry(self.alice, "WORK", 0, institution="A")
        self.b = make_entry(self.alice, "WORK", 1, institution="B")
        self.c = make_entry(self.alice, "WORK", 2, institution="C")
        self.edu = make_entry(self.alice, "EDUCATION", 0)
        self.edu2 = make_entry(self.alice, "EDUCATION", 1)
        self.login(self.alice)

    def batch(self, *pairs):
        return {"items": [{"id": str(e.pk), "order": o} for e, o in pairs]}

    def test_moving_c_up_persists_submitted_orders(self):
        resp = self.client.patch(REORDER_URL, self.batch((self.a, 0), (self.b, 2), (self.c, 1)), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.orders(self.a, self.b, self.c), [0, 2, 1])
        self.assertEqual([row["institution"] for row in resp.json()], ["A", "C", "B"])

    def test_other_category_is_untouched(self):
        before = self.orders(self.edu, self.edu2)
        self.client.patch(REORDER_URL, self.batch((self.a, 2), (self.b, 1), (self.c, 0)), format="json")
        self.assertEqual(self.orders(self.edu, self.edu2), before)

    def test_orders_are_stored_verbatim(self):
        resp = self.client.patch(REORDER_URL, self.batch((self.a, 7), (self.b, 3)), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.orders(self.a, self.b, self.c), [7, 3, 2])

    def test_numeric_ids_and_string_orders_are_coerced(self):
        payload = {"items": [{"id": self.a.pk, "order": "1"}, {"id": self.b.pk, "order": "0"}]}
        resp = self.client.patch(REORDER_URL, payload, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.orders(self.a, self.b), [1, 0])

    def test_foreign_entry_rejects_whole_batch(self):
        foreign = make_entry(self.bob, "WORK", 0)
        resp = self.client.patch(
            REORDER_URL, self.batch((self.a, 2), (self.b, 1), (foreign, 0)), format="json"
        )
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(self.orders(self.a, self.b, foreign), [0, 1, 0])
        self.assertIn("message", resp.json())

    def test_unknown_entry_rejects_whole_batch(self):
        payload = self.batch((self.a, 1), (self.b, 0))
        payload["items"].append({"id": "999999", "order": 2})
        resp = self.client.patch(REORDER_URL, payload, format="json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.orders(self.a, self.b), [0, 1])

    def test_empty_batch_is_a_validation_error(self):
        resp = self.client.patch(REORDER_URL, {"items": []}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_missing_items_is_a_validation_error(self):
        resp = self.client.patch(REORDER_URL, {}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_negative_order_is_rejected(self):
        resp = self.client.patch(REORDER_URL, self.batch((self.a, -1)), format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.orders(self.a), [0])

    def test_non_numeric_id_is_rejected(self):
        resp = self.client.patch(REORDER_URL, {"items": [{"id": "abc", "order": 0}]}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_duplicate_ids_are_rejected(self):
        resp = self.client.patch(REORDER_URL, self.batch((self.a, 0), (self.a, 1)), format="json")
        self.assertEqual(resp.status_code, 400)

    def test_order_beyond_column_range_is_rejected(self):
        for order in (2**31, 10**20):
            resp = self.client.patch(REORDER_URL, self.batch((self.a, order)), format="json")
            self.assertEqual(resp.status_code, 400)
            self.assertIn("message", resp.json())
        self.assertEqual(self.orders(self.a), [0])

    def test_id_beyond_column_range_is_rejected(self):
        resp = self.client.patch(REORDER_URL, {"items": [{"id": "1" + "0" * 25, "order": 0}]}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("message", resp.json())

    def test_anonymous_caller_is_rejected(self):
        self.client.force_authenticate(user=None)
        resp = self.client.patch(REORDER_URL, self.batch((self.a, 1)), format="json")
        self.assertEqual(resp.status_code, 401)

    def test_failure_mid_batch_rolls_back(self):
        real_write = timeline._write_order
        calls = []

        def flaky(pk, order, now):
            calls.append(pk)
            if len(calls) == 2:
                raise DatabaseError("connection lost")
            real_write(pk, order, now)

        with mock.patch.object(timeline, "_write_order", side_effect=flaky):
            resp = self.client.patch(
                REORDER_URL, self.batch((self.a, 2), (self.b, 0), (self.c, 1)), format="json"
            )
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(self.orders(self.a, self.b, self.c), [0, 1, 2])
        self.assertTrue(resp.json()["message"])


class MoveEndpointTests(ShowcaseAPITestCase):
    def setUp(self):
        super().setUp()
        self.a = make_entry(self.alice, "WORK", 0)
        self.b = make_entry(self.alice, "WORK", 1)
        self.c = make_entry(self.alice, "WORK", 2)
        self.cert = make_entry(self.alice, "CERTIFICATE", 5)
        self.login(self.alice)

    def move(self, entry, direction):
        return self.client.post(reverse("education-move", args=[entry.pk]), {"direction": direction}, format="json")

    def test_move_up_swaps_with_previous(self):
        resp = self.move(self.c, "up")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.orders(self.a, self.b, self.c), [0, 2, 1])
        self.assertEqual(self.orders(self.cert), [5])
        self.assertEqual([row["id"] for row in resp.json()], [self.a.pk, self.c.pk, self.b.pk])

    def test_move_down_swaps_with_next(self):
        self.move(self.a, "down")
        self.assertEqual(self.orders(self.a, self.b, self.c), [1, 0, 2])

    def test_move_past_the_end_changes_nothing(self):
        resp = self.move(self.a, "up")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.orders(self.a, self.b, self.c), [0, 1, 2])

    def test_move_renumbers_sparse_orders(self):
        TimelineEntry.objects.filter(pk=self.c.pk).update(order=40)
        self.move(self.c, "up")
        self.assertEqual(self.orders(self.a, self.b, self.c), [0, 2, 1])

    def test_cannot_move_someone_elses_entry(self):
        foreign = make_entry(self.bob, "WORK", 1)
        resp = self.move(foreign, "up")
        self.assertEqual(resp.status_code, 403)

    def test_invalid_direction(self):
        resp = self.move(self.b, "sideways")
        self.assertEqual(resp.status_code, 400)
