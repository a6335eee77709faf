from django.urls import reverse

from showcase.models import TimelineEntry

from .base import ShowcaseAPITestCase, make_entry

LIST_URL = reverse("education-list")


class TimelineEntryCrudTests(ShowcaseAPITestCase):
    def setUp(self):
        super().setUp()
        self.login(self.alice)

    def create(self, **fields):
        payload = {"type": "WORK", "institution": "Acme", "degree": "Engineer"}
        payload.update(fields)
        return self.client.post(LIST_URL, payload, format="json")

    def test_first_entry_in_category_gets_order_zero(self):
        make_entry(self.alice, "EDUCATION", 4)
        resp = self.create()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["order"], 0)

    def test_auto_order_appends_to_category(self):
        make_entry(self.alice, "WORK", 0)
        make_entry(self.alice, "WORK", 3)
        resp = self.create()
        self.assertEqual(resp.json()["order"], 4)

    def test_explicit_order_is_kept(self):
        make_entry(self.alice, "WORK", 0)
        resp = self.create(order=0)
        self.assertEqual(resp.json()["order"], 0)

    def test_response_carries_category_and_dates(self):
        resp = self.create(type="internship", start_date="2023-01-01", end_date="2023-07-15")
        body = resp.json()
        self.assertEqual(body["type"], "internship")
        self.assertEqual(body["category"], "INTERNSHIP")
        self.assertEqual(body["duration"], "6 Months")
        self.assertEqual(body["date_range"], "Jan 2023 - Jul 2023")

    def test_order_beyond_column_range_is_rejected(self):
        resp = self.create(order=10**20)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("order", resp.json())
        self.assertFalse(TimelineEntry.objects.filter(user=self.alice).exists())

    def test_end_before_start_is_rejected(self):
        resp = self.create(start_date="2023-05-01", end_date="2022-01-01")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("end_date", resp.json())

    def test_unknown_type_is_rejected(self):
        self.assertEqual(self.create(type="HOBBY").status_code, 400)

    def test_owner_updates_and_deletes(self):
        entry = make_entry(self.alice, "WORK", 0)
        url = reverse("education-detail", args=[entry.pk])
        resp = self.client.patch(url, {"degree": "Lead"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["degree"], "Lead")
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertFalse(TimelineEntry.objects.filter(pk=entry.pk).exists())

    def test_changing_category_appends_to_new_category(self):
        make_entry(self.alice, "EDUCATION", 0)
        make_entry(self.alice, "EDUCATION", 1)
        entry = make_entry(self.alice, "WORK", 0)
        resp = self.client.patch(reverse("education-detail", args=[entry.pk]), {"type": "EDUCATION"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["order"], 2)
        self.assertEqual(TimelineEntry.objects.get(pk=entry.pk).order, 2)

    def test_changing_category_keeps_explicit_order(self):
        make_entry(self.alice, "EDUCATION", 0)
        entry = make_entry(self.alice, "WORK", 3)
        url = reverse("education-detail", args=[entry.pk])
        resp = self.client.patch(url, {"type": "EDUCATION", "order": 0}, format="json")
        self.assertEqual(resp.json()["order"], 0)

    def test_switching_to_legacy_alias_keeps_order(self):
        make_entry(self.alice, "EDUCATION", 0)
        entry = make_entry(self.alice, "EDUCATION", 1)
        url = reverse("education-detail", args=[entry.pk])
        resp = self.client.patch(url, {"type": "education"}, format="json")
        self.assertEqual(resp.json()["order"], 1)

    def test_cannot_edit_someone_elses_entry(self):
        entry = make_entry(self.bob, "WORK", 0)
        resp = self.client.patch(reverse("education-detail", args=[entry.pk]), {"degree": "x"}, format="json")
        self.assertEqual(resp.status_code, 403)


class PublicTimelineTests(ShowcaseAPITestCase):
    def setUp(self):
        super().setUp()
        self.w1 = make_entry(self.bob, "WORK", 1)
        self.w0 = make_entry(self.bob, "WORK", 0)
        self.e0 = make_entry(self.bob, "education", 0)
        self.e1 = make_entry(self.bob, "EDUCATION", 1)
        make_entry(self.alice, "WORK", 0)

    def test_lists_owner_entries_in_display_order(self):
        resp = self.client.get(reverse("user-educations", args=["bob"]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 4)
        work = [row["id"] for row in resp.json() if row["category"] == "WORK"]
        self.assertEqual(work, [self.w0.pk, self.w1.pk])

    def test_category_filter_includes_legacy_rows(self):
        resp = self.client.get(reverse("user-educations", args=["bob"]), {"category": "EDUCATION"})
        self.assertEqual([row["id"] for row in resp.json()], [self.e0.pk, self.e1.pk])

    def test_invalid_category_filter(self):
        resp = self.client.get(reverse("user-educations", args=["bob"]), {"category": "HOBBY"})
        self.assertEqual(resp.status_code, 400)
