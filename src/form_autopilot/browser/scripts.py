"""JavaScript evaluated inside the page by the Playwright host."""

# Shared helpers: stable selector generation and fillable field collection.
_HELPERS = """
const __apSelector = (element) => {
    if (element.id) return `#${CSS.escape(element.id)}`;
    const testId = element.getAttribute('data-testid');
    if (testId) return `[data-testid="${CSS.escape(testId)}"]`;
    const name = element.getAttribute('name');
    if (name) return `[name="${CSS.escape(name)}"]`;
    const ariaLabel = element.getAttribute('aria-label');
    if (ariaLabel) return `[aria-label="${CSS.escape(ariaLabel)}"]`;

    const path = [];
    let current = element;
    while (current && current !== document.body && current !== document.documentElement) {
        let part = current.tagName.toLowerCase();
        const classes = Array.from(current.classList)
            .filter((c) => !c.includes('--') && !/^[a-z]+_[a-z0-9]+$/i.test(c))
            .slice(0, 2);
        if (classes.length) part += '.' + classes.map((c) => CSS.escape(c)).join('.');
        const parent = current.parentElement;
        if (parent) {
            const siblings = Array.from(parent.children).filter((s) => s.tagName === current.tagName);
            if (siblings.length > 1) part += `:nth-of-type(${siblings.indexOf(current) + 1})`;
        }
        path.unshift(part);
        current = current.parentElement;
        if (path.length >= 3) break;
    }
    return path.join(' > ');
};

const __apFillable = (root) => Array.from(root.querySelectorAll('input, textarea, select'))
    .filter((el) => !['hidden', 'submit', 'button'].includes(el.type));

const __apDescribe = (el) => {
    let label = '';
    const labelEl = (el.labels && el.labels[0]) || (el.id ? document.querySelector(`label[for="${CSS.escape(el.id)}"]`) : null);
    if (labelEl) {
        label = (labelEl.textContent || '').trim();
    } else if (el.placeholder) {
        label = el.placeholder;
    } else if (el.getAttribute('aria-label')) {
        label = el.getAttribute('aria-label') || '';
    }
    return {
        name: el.name || el.id || '',
        type: el.type || el.tagName.toLowerCase(),
        value: el.value || '',
        label,
        required: !!el.required,
        selector: __apSelector(el),
        placeholder: el.placeholder || '',
    };
};
"""

SCAN_WHOLE_FORMS = "() => {" + _HELPERS + """
    return Array.from(document.querySelectorAll('form')).map((form, index) => ({
        id: form.id || `form-${index}`,
        selector: __apSelector(form),
        action: form.action || window.location.href,
        method: form.method || 'GET',
        fields: __apFillable(form).map(__apDescribe),
    })).filter((form) => form.fields.length > 0);
}"""

SCAN_CONTAINER = "(selector) => {" + _HELPERS + """
    const root = selector ? document.querySelector(selector) : document;
    if (!root) return { found: false, fields: [], title: document.title, pageUrl: window.location.href };
    return {
        found: true,
        fields: __apFillable(root).map(__apDescribe),
        title: document.title,
        pageUrl: window.location.href,
    };
}"""

# Element primitives used by the fill executor host.
ELEMENT_KIND = """(el) => {
    if (!el.isConnected) throw new Error('detached');
    if (el.isContentEditable) return 'rich_text';
    if (el.tagName === 'SELECT') return 'choice';
    if (el.type === 'checkbox' || el.type === 'radio') return 'toggle';
    return 'value';
}"""

ELEMENT_SET_RICH_TEXT = "(el, markup) => { el.innerHTML = markup; }"

ELEMENT_OPTIONS = "(el) => Array.from(el.options).map((o) => [o.value, (o.textContent || '').trim()])"

ELEMENT_SELECT_VALUE = "(el, value) => { el.value = value; }"

ELEMENT_VALUE_ATTRIBUTE = "(el) => el.value"

ELEMENT_SET_CHECKED = "(el, checked) => { el.checked = checked; }"

# Prototype setter, not el.value: reactive value trackers ignore own-property writes.
ELEMENT_SET_VALUE = """(el, value) => {
    const descriptor = Object.getOwnPropertyDescriptor(Object.getPrototypeOf(el), 'value');
    if (descriptor && descriptor.set) {
        descriptor.set.call(el, value);
    } else {
        el.value = value;
    }
}"""

ELEMENT_DISPATCH = "(el, type) => { el.dispatchEvent(new Event(type, { bubbles: true })); }"

# Overlay box plus label chip, tracked on window so it can be replaced or removed.
SHOW_HIGHLIGHT = """({ key, selector, label, color }) => {
    const registry = (window.__apHighlights = window.__apHighlights || {});
    const existing = registry[key];
    if (existing) {
        window.removeEventListener('scroll', existing.reposition, true);
        window.removeEventListener('resize', existing.reposition);
        existing.box.remove();
        existing.chip.remove();
        delete registry[key];
    }
    const target = document.querySelector(selector);
    if (!target) return false;

    const box = document.createElement('div');
    box.setAttribute('data-autopilot-overlay', key);
    Object.assign(box.style, {
        position: 'fixed', pointerEvents: 'none', zIndex: '2147483646',
        border: `2px solid ${color}`, background: `${color}1a`, borderRadius: '4px',
        transition: 'all 60ms ease-out',
    });
    const chip = document.createElement('div');
    chip.setAttribute('data-autopilot-overlay', key);
    chip.textContent = label || '';
    Object.assign(chip.style, {
        position: 'fixed', pointerEvents: 'none', zIndex: '2147483647',
        background: color, color: '#fff', font: '12px/1.4 system-ui, sans-serif',
        padding: '2px 6px', borderRadius: '3px', whiteSpace: 'nowrap',
        display: label ? 'block' : 'none',
    });

    const reposition = () => {
        const rect = target.getBoundingClientRect();
        Object.assign(box.style, {
            top: `${rect.top}px`, left: `${rect.left}px`,
            width: `${rect.width}px`, height: `${rect.height}px`,
        });
        Object.assign(chip.style, {
            top: `${Math.max(0, rect.top - 22)}px`, left: `${rect.left}px`,
        });
    };
    reposition();
    document.documentElement.appendChild(box);
    document.documentElement.appendChild(chip);
    window.addEventListener('scroll', reposition, true);
    window.addEventListener('resize', reposition);
    registry[key] = { box, chip, reposition };
    return true;
}"""

REMOVE_HIGHLIGHT = """(key) => {
    const registry = window.__apHighlights || {};
    const existing = registry[key];
    if (!existing) return false;
    window.removeEventListener('scroll', existing.reposition, true);
    window.removeEventListener('resize', existing.reposition);
    existing.box.remove();
    existing.chip.remove();
    delete registry[key];
    return true;
}"""

# Inspect listeners. Pointer press/release is swallowed in the capture phase; hover
# reports the ancestor chain of the element under the pointer to the Python side,
# which resolves the container.
INSTALL_INSPECT_LISTENERS = "({ binding, cancelKey }) => {" + _HELPERS + """
    if (window.__apInspect) return false;
    const send = (payload) => window[binding](payload);
    const chainOf = (element) => {
        const chain = [];
        let current = element;
        while (current && current.nodeType === 1) {
            chain.push({
                tag: current.tagName.toLowerCase(),
                attributes: {
                    id: current.id || '',
                    class: typeof current.className === 'string' ? current.className : '',
                    role: current.getAttribute('role') || '',
                },
                fillableCount: __apFillable(current).length,
                selector: __apSelector(current),
            });
            current = current.parentElement;
        }
        return chain;
    };
    let pending = false;
    let lastTarget = null;
    const onMove = (event) => {
        const target = event.target;
        if (!target || target === lastTarget || target.hasAttribute('data-autopilot-overlay')) return;
        lastTarget = target;
        if (pending) return;
        pending = true;
        requestAnimationFrame(() => {
            pending = false;
            send({ type: 'move', chain: chainOf(lastTarget) });
        });
    };
    const swallow = (event) => {
        if (event.button !== 0) return;
        event.preventDefault();
        event.stopPropagation();
        event.stopImmediatePropagation();
    };
    const onClick = (event) => {
        if (event.button !== 0) return;
        swallow(event);
        send({ type: 'commit' });
    };
    const onKey = (event) => {
        if (event.key !== cancelKey) return;
        event.preventDefault();
        event.stopPropagation();
        send({ type: 'cancel' });
    };
    const handlers = [
        ['mousemove', onMove], ['pointerdown', swallow], ['pointerup', swallow],
        ['mousedown', swallow], ['mouseup', swallow], ['click', onClick], ['keydown', onKey],
    ];
    handlers.forEach(([type, handler]) => document.addEventListener(type, handler, true));
    const previousCursor = document.documentElement.style.cursor;
    document.documentElement.style.cursor = 'crosshair';
    window.__apInspect = { handlers, previousCursor };
    return true;
}"""

REMOVE_INSPECT_LISTENERS = """() => {
    const state = window.__apInspect;
    if (!state) return false;
    state.handlers.forEach(([type, handler]) => document.removeEventListener(type, handler, true));
    document.documentElement.style.cursor = state.previousCursor;
    delete window.__apInspect;
    return true;
}"""
