"""Numeric and language constants shared by the recipe view model."""

# When initialising, poll the extractor every MILLIS_BETWEEN_UPDATES
# milliseconds for progress updates.
MILLIS_BETWEEN_UPDATES = 500

# The number of steps it takes to detect a recipe. Progress is reported in
# increments of 1 / DETECTION_STEPS.
DETECTION_STEPS = 4

# The maximum number of people you can cook for.
MAX_PEOPLE = 80

# Stop actively polling for progress after MAX_WAIT_TIME milliseconds.
MAX_WAIT_TIME = 15000

MAX_PERCENTAGE = 100.0

# Servings used when the extractor could not determine them.
DEFAULT_SERVINGS_AMOUNT = 4

SOURCE_LANGUAGE = "en"
TARGET_LANGUAGE = "nl"

# Preference key of the "translate to TARGET_LANGUAGE" toggle.
TRANSLATE_PREFERENCE_KEY = "translate"
