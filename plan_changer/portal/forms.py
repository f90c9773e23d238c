"""
BeautifulSoup-based form scraping and field-set override rules.

`scrape_form` reproduces what a browser would submit for a form:

* ``<input name=X>``: checkbox/radio only when checked (value, or ``"on"``
  without one); every other type submits its value (``""`` when absent).
* ``<select name=X>``: the selected option's value (its text when it has no
  value attribute); with nothing selected, the first option.
* ``<textarea name=X>``: its text content.

Inputs are processed first, then selects, then textareas. The last writer
wins on duplicate names. Elements without a name are ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping

from bs4 import BeautifulSoup, Tag

_CHECKABLE_TYPES = frozenset({"checkbox", "radio"})


class FormFieldSet(MutableMapping[str, str]):
    """
    Field name -> value mapping scraped from one form and replayed by one POST.

    Override precedence is applied through `apply_overrides` only:
    ``defaults`` fill names the scraped form did not carry, ``forced`` values
    replace whatever is there. Forced wins over defaults for the same name.
    """

    def __init__(self, fields: Mapping[str, str] | None = None) -> None:
        self._fields: dict[str, str] = dict(fields or {})

    def __getitem__(self, key: str) -> str:
        return self._fields[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._fields[key] = value

    def __delitem__(self, key: str) -> None:
        del self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FormFieldSet({self._fields!r})"

    def first_present(self, candidates: Iterable[str], default: str) -> str:
        """
        First of `candidates` that is a field name here, else `default`.
        """

        for name in candidates:
            if name in self._fields:
                return name
        return default

    def apply_overrides(
        self,
        *,
        defaults: Mapping[str, str] | None = None,
        forced: Mapping[str, str] | None = None,
    ) -> FormFieldSet:
        for key, value in (defaults or {}).items():
            self._fields.setdefault(key, value)
        for key, value in (forced or {}).items():
            self._fields[key] = value
        return self

    def as_dict(self) -> dict[str, str]:
        return dict(self._fields)


def scrape_form(form: Tag) -> FormFieldSet:
    """
    Extract every submittable name/value pair from one form element.
    """

    fields = FormFieldSet()

    for node in form.find_all("input"):
        name = node.get("name")
        if not name:
            continue
        input_type = (node.get("type") or "text").strip().lower()
        value = node.get("value")
        if input_type in _CHECKABLE_TYPES:
            if node.has_attr("checked"):
                fields[name] = value if value is not None else "on"
        else:
            fields[name] = value if value is not None else ""

    for node in form.find_all("select"):
        name = node.get("name")
        if not name:
            continue
        option = node.find("option", selected=True) or node.find("option")
        if option is None:
            continue
        value = option.get("value")
        fields[name] = value if value is not None else option.get_text()

    for node in form.find_all("textarea"):
        name = node.get("name")
        if not name:
            continue
        fields[name] = node.get_text()

    return fields


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


def page_title(soup: BeautifulSoup) -> str:
    return " ".join(node.get_text() for node in soup.find_all("title"))


def describe_forms(soup: BeautifulSoup) -> list[dict[str, object]]:
    """
    Summaries of every form on a page, for layout diagnostics in logs.
    """

    summaries: list[dict[str, object]] = []
    for index, form in enumerate(soup.find_all("form")):
        summaries.append(
            {
                "index": index,
                "method": (form.get("method") or "get").upper(),
                "name": form.get("name") or "",
                "action": form.get("action") or "",
                "inputs": len(form.find_all("input")),
                "selects": len(form.find_all("select")),
                "textareas": len(form.find_all("textarea")),
            }
        )
    return summaries
