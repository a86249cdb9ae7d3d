import base64

import pytest

from cyberassess.app import build_question_cards, create_app, decode_upload
from cyberassess.config import APP_TITLE, Settings
from cyberassess.errors import ValidationError


def _radio_ids(component):
    found = []
    children = getattr(component, "children", None)
    if isinstance(getattr(component, "id", None), dict):
        found.append(component.id["qid"])
    if isinstance(children, (list, tuple)):
        for child in children:
            found.extend(_radio_ids(child))
    elif children is not None and not isinstance(children, str):
        found.extend(_radio_ids(children))
    return found


def test_question_cards_cover_every_question(nist):
    cards = build_question_cards(nist, {"gv.oc-q1": 2})
    assert len(cards) == len(nist.sections)
    qids = [qid for card in cards for qid in _radio_ids(card)]
    assert qids == nist.question_ids()


def test_create_app_in_local_only_mode(tmp_path, repository, service):
    service.create_assessment("cmmc")
    app = create_app(Settings(data_dir=tmp_path), repository=repository)
    assert app.title == APP_TITLE

    layout = build_layout_from(app)
    text = repr(layout)
    assert "Running in local-only mode" in text
    assert "CMMC (Cybersecurity Maturity Model Certification) - Unnamed" in text
    assert "Include charts in PDF" in text


def build_layout_from(app):
    layout = app.layout
    return layout() if callable(layout) else layout


def test_decode_upload_reads_data_url():
    payload = base64.b64encode(b'{"id": "x"}').decode("ascii")
    assert decode_upload(f"data:application/json;base64,{payload}") == b'{"id": "x"}'


@pytest.mark.parametrize("contents", ["data:application/json;base64,abc", "data:text/plain;base64,!!!!"])
def test_decode_upload_rejects_bad_base64(contents):
    with pytest.raises(ValidationError, match="could not be decoded"):
        decode_upload(contents)
