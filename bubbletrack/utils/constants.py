STORAGE_KEY = 'activities-store-v1'
LEGACY_STORAGE_KEY = 'activities'  # bare-list payload of older builds

MS_PER_DAY = 24 * 60 * 60 * 1000

DEFAULT_BUBBLE_SIZE = 120  # px
DRAG_THRESHOLD_PX = 4
RESET_PULSE_MS = 420

NOW_REFRESH_SECONDS = 60
RESIZE_DEBOUNCE_SECONDS = 0.1

DEFAULT_IMAGE_URL = '/static/bubble-placeholder.png'

CATEGORIES = [
    ('friends', 'Friends'),
    ('family', 'Family'),
    ('household', 'Household'),
    ('wife', 'Wife'),
    ('creative', 'Creative'),
]
