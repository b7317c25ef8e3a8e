"""
Yandex Telemost selectors and page scripts.

Telemost is localized (ru/en) and its class names are generated, so most
elements come with several fallback selectors, tried in order.
"""

# =============================================================================
# PAGE CONSTANTS
# =============================================================================

TELEMOST_DOMAIN = "telemost.yandex.ru"

# Redirect targets meaning the meeting needs a Yandex account
TELEMOST_SIGN_IN_URL_PATTERNS = ("passport.yandex", "/auth")

TELEMOST_REMOVAL_PHRASES = (
    "You've been removed from the meeting",
    "Доступ запрещен",
    "Connection lost",
)

# Page texts meaning the host turned the request down
TELEMOST_DENIAL_PHRASES = (
    "Доступ запрещен",
    "Access denied",
)

TELEMOST_LOBBY_URL_PATTERNS = ("lobby", "waiting")


# =============================================================================
# SELECTORS
# =============================================================================

TELEMOST_SELECTORS = {
    "cookie_consent": [
        'button:has-text("Принять")',
        'button:has-text("Accept")',
    ],
    "guest_join": [
        'button:has-text("Войти как гость")',
        'button:has-text("Join as guest")',
        'button:has-text("Войти анонимно")',
        'button:has-text("Join anonymously")',
        'button[data-testid="guest-join-button"]',
        'a[href*="guest"]',
    ],
    "name_input": [
        'input[data-testid="orb-textinput-input"]',
        '[data-testid="orb-textinput"] input[type="text"]',
        'input.Orb-Textinput-input',
        'input[type="text"][class*="Orb-Textinput"]',
        'input[type="text"]',
    ],
    "device_permission": [
        'button:has-text("Разрешить")',
        'button:has-text("Allow")',
        'button:has-text("Продолжить")',
        'button:has-text("Continue")',
        'button[data-testid="allow-button"]',
    ],
    "join_button": [
        'button[data-test-id="enter-conference-button"]',
        'button.joinMeetingButton_M38VH',
        'button:has-text("Подключиться")',
        'button:has-text("Join")',
        'button[class*="joinMeetingButton"]',
        'button:has-text("Присоединиться")',
        'button:has-text("Войти")',
    ],
    "meeting_content": [
        'div[role="main"]',
        'video',
        '[data-testid="meeting-container"]',
    ],
    "close_dialog": [
        'button[aria-label="Закрыть"]',
        'button[aria-label="Close"]',
        'button:has-text("Закрыть")',
        'button:has-text("Close")',
        'button:has-text("ОК")',
        'button:has-text("OK")',
        '[data-testid="close-button"]',
    ],
}


# =============================================================================
# PAGE SCRIPTS
# =============================================================================

# Number of people in the call, or null when it cannot be read
PARTICIPANT_COUNT_JS = """
() => {
    const numeric = /^\\d+$/;

    const findPeopleButton = () => {
        let btn = document.querySelector('button[aria-label^="People"]')
            || document.querySelector('button[aria-label*="People"]')
            || document.querySelector('button[aria-label*="Участники"]');
        if (btn) {
            return btn;
        }
        const buttons = Array.from(document.querySelectorAll('button[aria-label]'));
        btn = buttons.find((b) => /^People - \\d+ joined$/.test(b.getAttribute('aria-label') || ''));
        if (btn) {
            return btn;
        }
        return buttons.find((b) => Array.from(b.querySelectorAll('i')).some(
            (i) => i.textContent && i.textContent.trim() === 'people'
        )) || null;
    };

    try {
        const peopleBtn = findPeopleButton();
        if (!peopleBtn) {
            return null;
        }
        const label = peopleBtn.getAttribute('aria-label') || '';
        const joined = label.match(/(\\d+) joined/);
        if (joined) {
            return Number(joined[1]);
        }
        const container = peopleBtn.parentNode && peopleBtn.parentNode.parentNode;
        if (!container) {
            return null;
        }
        for (const node of Array.from(container.querySelectorAll('div'))) {
            const text = typeof node.innerText === 'string' ? node.innerText.trim() : '';
            if (numeric.test(text)) {
                return Number(text);
            }
        }
    } catch (error) {
        console.error('Error getting contributors count:', error);
    }
    return null;
}
"""

PAGE_STATE_JS = """
() => ({
    url: window.location.href,
    bodyText: document.body ? document.body.innerText : '',
    hasMeetingUi: document.querySelector('video') !== null
        || document.querySelector('[data-testid="meeting-container"]') !== null
        || document.querySelector('button[aria-label="Leave call"]') !== null,
})
"""

DISMISS_MODALS_JS = """
() => {
    const result = { clicked: 0, failed: 0, lastError: null };
    const labels = ['OK', 'ОК', 'Закрыть', 'Close'];
    const buttons = Array.from(document.querySelectorAll('button, [role="button"]'));
    const dismissButtons = buttons.filter((button) => {
        const text = button.textContent || button.getAttribute('aria-label');
        return text && labels.some((label) => text.includes(label));
    });
    for (const button of dismissButtons) {
        try {
            // Hidden buttons have no offsetParent
            if (button.offsetParent !== null) {
                button.click();
                result.clicked += 1;
            }
        } catch (error) {
            result.failed += 1;
            result.lastError = String(error);
        }
    }
    return result;
}
"""


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_selectors_for(element_type: str) -> list:
    """
    Get list of selectors for a specific element type.

    Args:
        element_type: Key from TELEMOST_SELECTORS dict

    Returns:
        List of CSS/text selectors to try
    """
    return TELEMOST_SELECTORS.get(element_type, [])
