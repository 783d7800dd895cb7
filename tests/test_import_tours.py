import json

import pytest
from django.core.management import CommandError, call_command

from tours.models import Tour

pytestmark = pytest.mark.django_db


def test_import_default_data_file():
    call_command("import_tours")
    assert Tour.objects.count() == 5
    hiker = Tour.objects.get(name="The Forest Hiker")
    assert hiker.slug == "the-forest-hiker"
    assert hiker.max_group_size == 25
    assert len(hiker.start_dates) == 3


def test_delete_removes_every_tour(make_tour):
    make_tour()
    make_tour(secret_tour=True)
    call_command("import_tours", "--delete")
    assert Tour.objects.count() == 0


def test_invalid_record_aborts_whole_import(tmp_path):
    data = [
        {
            "name": "A Perfectly Fine Tour",
            "duration": 3,
            "maxGroupSize": 8,
            "difficulty": "easy",
            "price": 100,
            "summary": "Fine",
            "imageCover": "fine.jpg",
        },
        {"name": "Bad"},
    ]
    path = tmp_path / "tours.json"
    path.write_text(json.dumps(data), encoding="utf-8")

    with pytest.raises(CommandError) as exc:
        call_command("import_tours", "--file", str(path))
    assert "Record 1" in str(exc.value)
    assert Tour.objects.count() == 0


def test_missing_file(tmp_path):
    with pytest.raises(CommandError):
        call_command("import_tours", "--file", str(tmp_path / "missing.json"))
