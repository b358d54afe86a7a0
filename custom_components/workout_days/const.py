"""Constants for Workout Days integration."""

from __future__ import annotations

from homeassistant.const import Platform

DOMAIN = "workout_days"

PLATFORMS: list[Platform] = [
    Platform.BUTTON,
    Platform.SENSOR,
]

CONF_NAME = "name"
CONF_VARIANT = "variant"
CONF_TRAINER_A = "trainer_a"
CONF_TRAINER_B = "trainer_b"
CONF_MAX_ACTIVE_DAYS = "max_active_days"

VARIANT_PERSONAL = "personal"
VARIANT_TRAINERS = "trainers"
VARIANT_CHOICES = [VARIANT_PERSONAL, VARIANT_TRAINERS]

DEFAULT_NAME = "Workout Days"
DEFAULT_VARIANT = VARIANT_PERSONAL
DEFAULT_TRAINER_A = "Trainer A"
DEFAULT_TRAINER_B = "Trainer B"
DEFAULT_MAX_ACTIVE_DAYS = 7

# Window geometry (days).
DAYS_BEFORE_CENTER = 7
DAYS_AFTER_CENTER = 14
DISPLAY_PAGE = 7
SEED_DAYS = 7
HISTORY_LIMIT_DAYS = 30

# Tables
TABLE_DAYS = "days"
TABLE_WEIGHT = "weight_entries"
TABLE_TRAINERS = "trainers"
TABLE_PROFILES = "profiles"
TABLE_FRIENDS = "friends"
TABLE_FRIEND_REQUESTS = "friend_requests"
TABLE_ACTIVITIES = "activities"
TABLE_ACTIVITY_LIKES = "activity_likes"
TABLE_ACTIVITY_COMMENTS = "activity_comments"
TABLE_COMMENT_LIKES = "comment_likes"

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20

FEED_PAGE_SIZE = 20
COMMENT_MAX_LENGTH = 500
COMMENT_PREVIEW_LENGTH = 100

DURATION_PRESETS = [15, 30, 45, 60, 90]
EXERCISE_SUGGESTIONS = [
    "Push-ups",
    "Squats",
    "Plank",
    "Lunges",
    "Burpees",
    "Deadlifts",
    "Bench Press",
    "Pull-ups",
    "Running",
    "Cycling",
]
