AI_FOOTER = "AI generated - Verify with official sources"
APP_VERSION = "1.0.0"
APP_MODE = "Development"

OPTION_LABELS = ("A", "B", "C", "D")

COLOR_PRIMARY = 0x5865F2
COLOR_ERROR = 0xED4245
