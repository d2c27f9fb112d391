EMOTIONS = [
    ("happy", "Happy"),
    ("calm", "Calm"),
    ("anxious", "Anxious"),
    ("sad", "Sad"),
    ("angry", "Angry"),
]
EMOTION_KEYS = {key for key, _ in EMOTIONS}
EMOTION_LABELS = dict(EMOTIONS)

TRADE_TYPES = [
    "Long Future",
    "Short Future",
    "BTO Call",
    "BTO Put",
    "STO Call",
    "STO Put",
]

INTENSITY_MIN = 1
INTENSITY_MAX = 10
MAX_IMAGE_BYTES = 2 * 1024 * 1024

ENTRIES_KEY = "emotion-journal-entries"
PROFILE_KEY = "emotion-journal-profile"
QUESTS_KEY = "emotion-journal-quests"
LEADS_KEY = "emotion-journal-leads"
AUTH_SESSION_KEY = "deltajournal-auth-token"

PLACEHOLDER_API_URL = "YOUR_API_URL"
PLACEHOLDER_API_KEY = "YOUR_API_KEY"

DEFAULT_LOCAL_PROFILE = {
    "name": "Welcome!",
    "alias": "Journal is stored locally",
    "picture": None,
    "journalPurpose": "This diary I fill it on the mornings so represent the way I wake up",
}
NEW_REMOTE_PURPOSE = "This is my new emotion journal!"
EMPTY_REMOTE_PURPOSE = "Click the 'Edit' button in the sidebar to set a purpose!"

NOT_CONFIGURED_MESSAGE = "Remote backend is not configured. Set JOURNAL_API_URL and JOURNAL_API_KEY."
NOT_AUTHENTICATED_MESSAGE = "User not authenticated. Please sign in again."

TRENDS_EMPTY_MESSAGE = "Not enough data to generate a summary. Start by logging your emotions daily!"
EMPTY_REPORT = {
    "summary": "No entries found in the selected date range.",
    "emotionFrequency": "Not applicable.",
    "intensityTrend": "Not applicable.",
    "insights": "Log some entries in this period to generate a report.",
}
