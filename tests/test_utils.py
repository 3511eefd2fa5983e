# 📄 File: tests/test_utils.py
#
# 🧭 Purpose (Layman Explanation):
# Checks the small helpers everything else leans on: timezones, URL slugs, plant health
# scores and badges, image sniffing and log formatting.
#
# 🧪 Purpose (Technical Summary):
# Pure-function tests for sproutsync.shared.utils (timezone, slugify, health_score,
# image_utils) and the log formatters.
#
# 🔗 Dependencies:
# - pytest
#
# 🔄 Connected Modules / Calls From:
# - pytest

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytest

from sproutsync.shared.utils.health_score import (
    calculate_care_streak,
    calculate_health_score,
    get_badge_tier,
)
from sproutsync.shared.utils.image_utils import (
    extract_image_from_html,
    extract_image_url_from_search_engine,
    get_mime_type_from_buffer,
    get_mime_type_from_url,
    is_image_buffer,
)
from sproutsync.shared.utils.logging import ContextualFormatter, SproutJsonFormatter, log_context
from sproutsync.shared.utils.slugify import to_slug
from sproutsync.shared.utils.timezone import (
    as_utc,
    normalize_timezone,
    should_overwrite_stored_timezone,
    start_of_day_in_timezone,
    start_of_day_plus_days_in_timezone,
    try_normalize_timezone,
)


@dataclass
class Task:
    next_due_on: datetime
    active: bool = True
    last_completed_on: Optional[datetime] = None


def _at(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 9, 0, tzinfo=timezone.utc)


TODAY = date(2024, 6, 15)


# =============================================================================
# TIMEZONES
# =============================================================================

class TestTimezone:
    def test_valid_zone_is_stripped(self):
        assert try_normalize_timezone("  Europe/Berlin ") == "Europe/Berlin"

    @pytest.mark.parametrize("value", [None, "", "   ", "Mars/Olympus_Mons"])
    def test_invalid_zone_returns_none(self, value):
        assert try_normalize_timezone(value) is None

    def test_normalize_falls_back_to_default(self):
        assert normalize_timezone("Not/AZone") == "UTC"

    @pytest.mark.parametrize("stored", [None, "", "UTC", "Etc/UTC", "gmt", "Z"])
    def test_placeholder_timezones_are_overwritten(self, stored):
        assert should_overwrite_stored_timezone(stored) is True

    def test_real_stored_timezone_is_kept(self):
        assert should_overwrite_stored_timezone("America/New_York") is False

    def test_as_utc_treats_naive_values_as_utc(self):
        assert as_utc(datetime(2024, 1, 1, 12, 0)) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert as_utc(None) is None

    def test_start_of_day_is_local_midnight_in_utc(self):
        base = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)
        # 05:00 on May 2nd in Tokyo
        assert start_of_day_in_timezone("Asia/Tokyo", base) == datetime(2024, 5, 1, 15, 0, tzinfo=timezone.utc)

    def test_start_of_day_in_negative_offset_zone(self):
        base = datetime(2024, 1, 10, 3, 0, tzinfo=timezone.utc)
        # Still January 9th in New York (UTC-5)
        assert start_of_day_in_timezone("America/New_York", base) == datetime(2024, 1, 9, 5, 0, tzinfo=timezone.utc)

    def test_adding_days_keeps_local_midnight_across_dst(self):
        base = datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)
        result = start_of_day_plus_days_in_timezone("America/New_York", 2, base)
        # Midnight EDT (UTC-4) on March 11th
        assert result == datetime(2024, 3, 11, 4, 0, tzinfo=timezone.utc)

    def test_invalid_zone_uses_utc_midnight(self):
        base = datetime(2024, 5, 1, 20, 0, tzinfo=timezone.utc)
        assert start_of_day_in_timezone("Nowhere/Land", base) == datetime(2024, 5, 1, tzinfo=timezone.utc)


# =============================================================================
# SLUGS
# =============================================================================

@pytest.mark.parametrize(
    "text, expected",
    [
        ("  Fiddle Leaf_Fig!! ", "fiddle-leaf-fig"),
        ("Monty", "monty"),
        ("--Snake   Plant--", "snake-plant"),
        ("Aloe (vera) #2", "aloe-vera-2"),
    ],
)
def test_to_slug(text, expected):
    assert to_slug(text) == expected


# =============================================================================
# HEALTH SCORE, STREAK & BADGES
# =============================================================================

class TestHealthScore:
    def test_no_overdue_tasks_scores_100(self):
        tasks = [Task(next_due_on=_at(TODAY)), Task(next_due_on=_at(TODAY + timedelta(days=2)))]
        assert calculate_health_score(tasks, TODAY) == 100

    def test_each_overdue_day_costs_a_point(self):
        tasks = [
            Task(next_due_on=_at(TODAY - timedelta(days=3))),
            Task(next_due_on=_at(TODAY - timedelta(days=5))),
        ]
        assert calculate_health_score(tasks, TODAY) == 92

    def test_inactive_tasks_are_ignored(self):
        tasks = [Task(next_due_on=_at(TODAY - timedelta(days=30)), active=False)]
        assert calculate_health_score(tasks, TODAY) == 100

    def test_score_never_drops_below_zero(self):
        tasks = [Task(next_due_on=_at(TODAY - timedelta(days=250)))]
        assert calculate_health_score(tasks, TODAY) == 0


class TestCareStreak:
    def test_no_tasks_means_no_streak(self):
        assert calculate_care_streak([], _at(TODAY - timedelta(days=10)), TODAY) == 0

    def test_plant_added_today_has_streak_of_one(self):
        tasks = [Task(next_due_on=_at(TODAY + timedelta(days=3)))]
        assert calculate_care_streak(tasks, _at(TODAY), TODAY) == 1

    def test_nothing_overdue_counts_every_day_since_creation(self):
        tasks = [Task(next_due_on=_at(TODAY + timedelta(days=1)))]
        assert calculate_care_streak(tasks, _at(TODAY - timedelta(days=9)), TODAY) == 10

    def test_only_inactive_tasks_counts_every_day(self):
        tasks = [Task(next_due_on=_at(TODAY - timedelta(days=5)), active=False)]
        assert calculate_care_streak(tasks, _at(TODAY - timedelta(days=4)), TODAY) == 5

    def test_overdue_with_recent_completion(self):
        tasks = [
            Task(
                next_due_on=_at(TODAY - timedelta(days=1)),
                last_completed_on=_at(TODAY - timedelta(days=2)),
            )
        ]
        assert calculate_care_streak(tasks, _at(TODAY - timedelta(days=20)), TODAY) == 18

    def test_overdue_with_stale_completion_resets_to_one(self):
        tasks = [
            Task(
                next_due_on=_at(TODAY - timedelta(days=1)),
                last_completed_on=_at(TODAY - timedelta(days=8)),
            )
        ]
        assert calculate_care_streak(tasks, _at(TODAY - timedelta(days=20)), TODAY) == 1

    def test_overdue_and_never_completed(self):
        tasks = [Task(next_due_on=_at(TODAY - timedelta(days=1)))]
        assert calculate_care_streak(tasks, _at(TODAY - timedelta(days=20)), TODAY) == 1


@pytest.mark.parametrize(
    "streak, name",
    [
        (0, "Sprout Starter"),
        (6, "Sprout Starter"),
        (7, "Green Guardian"),
        (29, "Green Guardian"),
        (30, "Bloom Buddy"),
        (60, "Master Grower"),
        (99, "Master Grower"),
        (100, "Evergreen Legend"),
        (365, "Evergreen Legend"),
    ],
)
def test_badge_tiers(streak, name):
    assert get_badge_tier(streak).name == name


def test_badge_to_dict_has_display_fields():
    badge = get_badge_tier(7).to_dict()
    assert set(badge) == {"name", "quote", "image"}
    assert badge["image"].startswith("/badges/")


# =============================================================================
# IMAGES
# =============================================================================

class TestImageUtils:
    def test_sniffs_common_formats(self):
        assert get_mime_type_from_buffer(b"\x89PNG\r\n\x1a\n" + b"\x00" * 8) == "image/png"
        assert get_mime_type_from_buffer(b"\xff\xd8\xff\xe0" + b"\x00" * 8) == "image/jpeg"
        assert get_mime_type_from_buffer(b"RIFF\x00\x00\x00\x00WEBP") == "image/webp"
        assert get_mime_type_from_buffer(b"GIF89a" + b"\x00" * 6) == "image/gif"

    def test_unknown_buffer_defaults_to_jpeg(self):
        assert get_mime_type_from_buffer(b"plain text body") == "image/jpeg"

    def test_is_image_buffer(self):
        assert is_image_buffer(b"\x89PNG\r\n\x1a\n")
        assert not is_image_buffer(b"<html></html>")
        assert not is_image_buffer(b"ab")

    def test_mime_type_from_url_ignores_query(self):
        assert get_mime_type_from_url("https://cdn.example.com/fern.png?w=400#top") == "image/png"
        assert get_mime_type_from_url("https://cdn.example.com/fern") == "image/jpeg"

    def test_unwraps_search_engine_links(self):
        bing = "https://www.bing.com/images/search?mediaurl=https%3A%2F%2Fimg.example.com%2Fa.jpg"
        google = "https://www.google.com/imgres?imgurl=https://img.example.com/b.png&tbnid=1"
        assert extract_image_url_from_search_engine(bing) == "https://img.example.com/a.jpg"
        assert extract_image_url_from_search_engine(google) == "https://img.example.com/b.png"
        assert extract_image_url_from_search_engine("https://example.com/c.jpg") == "https://example.com/c.jpg"

    def test_extracts_og_image_before_img_tags(self):
        html = (
            '<html><head><meta property="og:image" content="/media/monstera.jpg"></head>'
            '<body><img src="/static/logo.png"></body></html>'
        )
        assert extract_image_from_html(html, "https://plants.example.com/p/1") == (
            "https://plants.example.com/media/monstera.jpg"
        )

    def test_falls_back_to_first_img(self):
        html = '<div><img class="hero" src="https://cdn.example.com/pothos.webp"></div>'
        assert extract_image_from_html(html, "https://example.com") == "https://cdn.example.com/pothos.webp"
        assert extract_image_from_html("<p>no images</p>", "https://example.com") is None


# =============================================================================
# LOGGING
# =============================================================================

def _record(message: str = "🌱 watered") -> logging.LogRecord:
    return logging.LogRecord("sproutsync.test", logging.INFO, __file__, 1, message, None, None)


class TestLogFormatters:
    def test_json_lines_carry_service_host_and_request(self):
        formatter = SproutJsonFormatter()
        with log_context(request_id="req-1", user_id="user-1"):
            line = json.loads(formatter.format(_record()))

        assert line["message"] == "🌱 watered"
        assert line["service"] == "sproutsync-api"
        assert line["hostname"]
        assert line["request_id"] == "req-1"
        assert line["user_id"] == "user-1"

    def test_json_lines_omit_request_outside_context(self):
        line = json.loads(SproutJsonFormatter().format(_record()))
        assert "request_id" not in line
        assert "user_id" not in line

    def test_text_lines_use_dashes_without_context(self):
        formatter = ContextualFormatter("%(hostname)s %(request_id)s %(user_id)s %(message)s")
        hostname, request_id, user_id, message = formatter.format(_record("hello")).split(" ")
        assert hostname
        assert (request_id, user_id, message) == ("-", "-", "hello")
