"""In-page DOM classifier script for accessibility snapshots."""

# Anything a user can click, type into, or toggle.
INTERACTIVE_SELECTORS = ",".join(
    (
        "a[href]",
        "button",
        "input:not([type=hidden])",
        "textarea",
        "select",
        "details > summary",
        "[role=button]",
        "[role=link]",
        "[role=checkbox]",
        "[role=radio]",
        "[role=tab]",
        "[role=menuitem]",
        "[role=menuitemcheckbox]",
        "[role=menuitemradio]",
        "[role=switch]",
        "[role=slider]",
        "[role=combobox]",
        "[role=option]",
        "[role=spinbutton]",
        "[role=searchbox]",
        "[role=treeitem]",
        "[contenteditable=true]",
        "[contenteditable='']",
    )
)

# Headings, live regions, dialogs and described images.
MEANINGFUL_SELECTORS = ",".join(
    (
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "[role=heading]",
        "[role=alert]",
        "[role=alertdialog]",
        "[role=status]",
        "[role=dialog]",
        "img[alt]",
        "[aria-live]",
    )
)

_CLASSIFY_JS = """
({ interactiveSel, meaningfulSel, refAttr, maxLen, scopeSelector, maxRefs, passwordMask }) => {
  const truncate = (text, limit) => {
    const cleaned = String(text || "").replace(/\\s+/g, " ").trim();
    if (cleaned.length <= limit) return cleaned;
    return `${cleaned.slice(0, Math.max(0, limit - 3))}...`;
  };

  const isHidden = (el) => {
    if (!(el instanceof HTMLElement)) return false;
    if (el.hidden) return true;
    if (el.getAttribute("aria-hidden") === "true") return true;
    if (el instanceof HTMLInputElement && (el.type || "").toLowerCase() === "hidden") return true;

    const style = window.getComputedStyle(el);
    if (style.display === "none") return true;
    if (style.visibility === "hidden") return true;
    if (style.opacity === "0") return true;

    if (el.offsetWidth === 0 && el.offsetHeight === 0 && !el.getAttribute("role")) return true;
    return false;
  };

  const isAncestorHidden = (el) => {
    let current = el;
    while (current) {
      if (isHidden(current)) return true;
      current = current.parentElement;
    }
    return false;
  };

  const inputRoles = {
    button: "button",
    checkbox: "checkbox",
    email: "textbox",
    image: "button",
    number: "spinbutton",
    password: "textbox",
    radio: "radio",
    range: "slider",
    reset: "button",
    search: "searchbox",
    submit: "button",
    tel: "textbox",
    text: "textbox",
    url: "textbox",
  };

  const implicitRoleOf = (el) => {
    const tag = el.tagName.toLowerCase();
    switch (tag) {
      case "a":
        return el.hasAttribute("href") ? "link" : "";
      case "button":
      case "summary":
        return "button";
      case "input":
        return inputRoles[(el.type || "text").toLowerCase()] || "textbox";
      case "textarea":
        return "textbox";
      case "select":
        return el.multiple ? "listbox" : "combobox";
      case "option":
        return "option";
      case "h1":
      case "h2":
      case "h3":
      case "h4":
      case "h5":
      case "h6":
        return "heading";
      case "img":
        return "img";
      case "dialog":
        return "dialog";
      default:
        return "";
    }
  };

  const textContentRoles = new Set([
    "button", "link", "tab", "menuitem", "menuitemcheckbox", "menuitemradio",
    "treeitem", "heading", "option", "alert", "status",
  ]);
  const textContentTags = new Set([
    "button", "a", "summary", "h1", "h2", "h3", "h4", "h5", "h6", "option",
  ]);

  const textOfIds = (idList) =>
    String(idList || "")
      .split(/\\s+/)
      .filter(Boolean)
      .map((id) => {
        const target = document.getElementById(id);
        return target && target.textContent ? target.textContent.trim() : "";
      })
      .filter(Boolean)
      .join(" ");

  const isFormControl = (el) =>
    el instanceof HTMLInputElement ||
    el instanceof HTMLTextAreaElement ||
    el instanceof HTMLSelectElement;

  const accessibleNameOf = (el) => {
    if (!(el instanceof HTMLElement)) return "";

    const labelledBy = textOfIds(el.getAttribute("aria-labelledby"));
    if (labelledBy) return labelledBy;

    const ariaLabel = (el.getAttribute("aria-label") || "").trim();
    if (ariaLabel) return ariaLabel;

    if (isFormControl(el)) {
      if (el.id) {
        const byFor = document.querySelector(`label[for="${CSS.escape(el.id)}"]`);
        const text = byFor && byFor.textContent ? byFor.textContent.trim() : "";
        if (text) return text;
      }
      const parentLabel = el.closest("label");
      if (parentLabel) {
        const clone = parentLabel.cloneNode(true);
        for (const child of clone.querySelectorAll("input,textarea,select")) {
          child.remove();
        }
        const text = (clone.textContent || "").trim();
        if (text) return text;
      }
    }

    if (el instanceof HTMLImageElement && el.alt) return el.alt;
    if (el instanceof HTMLInputElement && (el.type || "").toLowerCase() === "image" && el.alt) {
      return el.alt;
    }

    const title = (el.getAttribute("title") || "").trim();
    if (title) return title;

    if (
      (el instanceof HTMLInputElement || el instanceof HTMLTextAreaElement) &&
      (el.placeholder || "").trim()
    ) {
      return el.placeholder.trim();
    }

    const tag = el.tagName.toLowerCase();
    const role = (el.getAttribute("role") || "").trim().toLowerCase();
    if (textContentRoles.has(role) || textContentTags.has(tag)) {
      const text = (el.textContent || "").trim();
      if (text) return text;
    }

    if (el instanceof HTMLInputElement) {
      const type = (el.type || "").toLowerCase();
      if ((type === "submit" || type === "reset" || type === "button") && el.value) {
        return el.value;
      }
    }
    return "";
  };

  const isContentEditable = (el) => {
    const attr = el.getAttribute("contenteditable");
    return attr === "true" || attr === "";
  };

  // undefined means "no value"; an empty string is still a defined value.
  const valueOf = (el) => {
    if (el instanceof HTMLInputElement) {
      const type = (el.type || "").toLowerCase();
      if (type === "checkbox" || type === "radio") return undefined;
      if (type === "password") return el.value ? passwordMask : "";
      return el.value;
    }
    if (el instanceof HTMLTextAreaElement) return el.value;
    if (el instanceof HTMLSelectElement) {
      const selected = el.options[el.selectedIndex];
      if (selected && selected.textContent) return selected.textContent.trim();
      return el.value;
    }
    if (isContentEditable(el)) return (el.textContent || "").trim();
    return undefined;
  };

  const optionsOf = (el) => {
    if (!(el instanceof HTMLSelectElement)) return undefined;
    return Array.from(el.options).map((option) =>
      truncate(option.textContent ? option.textContent.trim() : option.value, maxLen)
    );
  };

  const disabledOf = (el) => {
    if ("disabled" in el && el.disabled === true) return true;
    return el.getAttribute("aria-disabled") === "true";
  };

  const checkedOf = (el) => {
    if (el instanceof HTMLInputElement) {
      const type = (el.type || "").toLowerCase();
      if (type === "checkbox" || type === "radio") return el.checked;
    }
    const ariaChecked = el.getAttribute("aria-checked");
    if (ariaChecked !== null) return ariaChecked === "true";
    return undefined;
  };

  const expandedOf = (el) => {
    const ariaExpanded = el.getAttribute("aria-expanded");
    if (ariaExpanded === null) return undefined;
    return ariaExpanded === "true";
  };

  const descriptionOf = (el) => {
    const text = textOfIds(el.getAttribute("aria-describedby"));
    return text ? truncate(text, maxLen) : undefined;
  };

  const root = scopeSelector ? document.querySelector(scopeSelector) || document : document;

  for (const stale of document.querySelectorAll(`[${refAttr}]`)) {
    stale.removeAttribute(refAttr);
  }

  const seen = new Set();
  const out = [];
  let counter = 0;
  for (const el of root.querySelectorAll(`${interactiveSel},${meaningfulSel}`)) {
    if (seen.has(el)) continue;
    seen.add(el);
    if (maxRefs > 0 && counter >= maxRefs) break;
    if (isAncestorHidden(el)) continue;

    const explicitRole = (el.getAttribute("role") || "").trim().toLowerCase();
    const role = explicitRole || implicitRoleOf(el);
    if (!role) continue;

    const name = truncate(accessibleNameOf(el), maxLen);
    const rawValue = valueOf(el);
    if (!name && rawValue === undefined) continue;

    counter += 1;
    const ref = `r${counter}`;
    el.setAttribute(refAttr, ref);

    const checked = checkedOf(el);
    const expanded = expandedOf(el);
    out.push({
      ref,
      tag: el.tagName.toLowerCase(),
      role,
      name,
      value: rawValue === undefined ? null : truncate(rawValue, maxLen),
      disabled: disabledOf(el),
      checked: checked === undefined ? null : checked,
      expanded: expanded === undefined ? null : expanded,
      options: optionsOf(el) || null,
      description: descriptionOf(el) || null,
    });
  }
  return out;
}
"""
