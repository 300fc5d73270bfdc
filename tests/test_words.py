"""HTTP tests for the word list, batch entry and CSV import/export."""

import pytest
from httpx import AsyncClient

from backend.words_csv import UTF8_BOM, CsvImportError, parse_words_csv
from tests.conftest import sign_in


async def create(client: AsyncClient, **fields) -> dict:
    payload = {"mainWord": "Haus", "translation1": "house", "section": "1", **fields}
    response = await client.post("/api/words", json=payload)
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_fetch_word(auth_client: AsyncClient) -> None:
    word = await create(auth_client, mainWord="  Haus ", translation2="", exampleSentence="Das Haus ist alt.")
    assert word["message"] == "Word added successfully"
    assert word["mainWord"] == "Haus"
    assert word["translation2"] is None
    assert word["important"] is False

    fetched = (await auth_client.get(f"/api/words/{word['id']}")).json()
    assert fetched["exampleSentence"] == "Das Haus ist alt."


@pytest.mark.asyncio
async def test_create_requires_a_translation(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/api/words", json={"mainWord": "Haus", "section": "1"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_main_word(auth_client: AsyncClient) -> None:
    await create(auth_client)
    response = await auth_client.post(
        "/api/words", json={"mainWord": "Haus", "translation1": "home", "section": "2"}
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_flag_and_delete(auth_client: AsyncClient) -> None:
    word = await create(auth_client)
    response = await auth_client.patch(
        f"/api/words/{word['id']}",
        json={"mainWord": "Haus", "translation1": "home", "section": "2", "notes": "das"},
    )
    assert response.status_code == 200
    assert response.json()["translation1"] == "home"
    assert response.json()["notes"] == "das"

    response = await auth_client.post(f"/api/words/{word['id']}/important", json={"important": True})
    assert response.json()["important"] is True

    assert (await auth_client.delete(f"/api/words/{word['id']}")).status_code == 204
    assert (await auth_client.get(f"/api/words/{word['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_deleting_a_studied_word(auth_client: AsyncClient) -> None:
    word = await create(auth_client)
    started = (
        await auth_client.post("/api/learn/sessions", json={"type": "new", "direction": "main_to_trans1"})
    ).json()
    await auth_client.post(
        f"/api/learn/sessions/{started['sessionId']}/answer",
        json={"wordId": word["id"], "isCorrect": True},
    )

    assert (await auth_client.delete(f"/api/words/{word['id']}")).status_code == 204
    detail = (await auth_client.get(f"/api/learn/sessions/{started['sessionId']}")).json()
    assert detail["words"] == []


@pytest.mark.asyncio
async def test_words_are_private(auth_client: AsyncClient) -> None:
    word = await create(auth_client)
    await sign_in(auth_client, email="someone-else@example.com")
    assert (await auth_client.get(f"/api/words/{word['id']}")).status_code == 404
    assert (await auth_client.get("/api/words")).json() == []


@pytest.mark.asyncio
async def test_batch_skips_duplicates_and_keeps_order(auth_client: AsyncClient) -> None:
    await create(auth_client, section="A")
    response = await auth_client.post(
        "/api/words/batch",
        json={
            "words": [
                {"mainWord": "Haus", "translation1": "house", "section": "A"},
                {"mainWord": "Baum", "translation1": "tree", "section": "B"},
                {"mainWord": "Baum", "translation1": "tree", "section": "B"},
                {"mainWord": "Fluss", "translation1": "river", "section": "B"},
            ]
        },
    )
    body = response.json()
    assert body["added"] == 2
    assert body["skipped"] == 2

    words = (await auth_client.get("/api/words", params={"section": "B"})).json()
    assert [w["mainWord"] for w in words] == ["Baum", "Fluss"]

    sections = (await auth_client.get("/api/words/sections")).json()
    assert sections == {"sections": ["A", "B"]}


@pytest.mark.asyncio
async def test_batch_text(auth_client: AsyncClient) -> None:
    response = await auth_client.post(
        "/api/words/batch/text",
        json={"text": "Haus-house-bari-Das Haus ist alt\n\nBaum-tree-gach", "section": "3"},
    )
    assert response.status_code == 200
    words = (await auth_client.get("/api/words")).json()
    assert [(w["mainWord"], w["translation1"], w["translation2"]) for w in words] == [
        ("Haus", "house", "bari"),
        ("Baum", "tree", "gach"),
    ]
    assert words[0]["exampleSentence"] == "Das Haus ist alt"


@pytest.mark.asyncio
async def test_batch_text_reports_bad_lines(auth_client: AsyncClient) -> None:
    response = await auth_client.post(
        "/api/words/batch/text", json={"text": "Haus-house-bari\nBaum-tree", "section": "3"}
    )
    assert response.status_code == 400
    lines = response.json()["detail"]["lines"]
    assert len(lines) == 1
    assert lines[0].startswith("Line 2:")
    assert "German-English-Bangla" in lines[0]


@pytest.mark.asyncio
async def test_export_then_import(auth_client: AsyncClient) -> None:
    await create(auth_client, notes="neuter")
    first = await create(auth_client, mainWord="Stadt", translation1="city, town", section="2")
    await auth_client.post(f"/api/words/{first['id']}/important", json={"important": True})

    response = await auth_client.get("/api/words/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "recallio-words-" in response.headers["content-disposition"]
    exported = response.content

    assert (await auth_client.delete("/api/words")).status_code == 200
    assert (await auth_client.get("/api/words")).json() == []

    response = await auth_client.post(
        "/api/words/import", files={"file": ("words.csv", exported, "text/csv")}
    )
    assert response.status_code == 200
    assert response.json()["imported"] == 2

    words = {w["mainWord"]: w for w in (await auth_client.get("/api/words")).json()}
    assert words["Stadt"]["translation1"] == "city, town"
    assert words["Stadt"]["important"] is True
    assert words["Haus"]["notes"] == "neuter"

    # Importing the same file again adds nothing
    response = await auth_client.post(
        "/api/words/import", files={"file": ("words.csv", exported, "text/csv")}
    )
    assert response.json() == {
        "message": "Imported 0 new words. Skipped 2 duplicate(s).",
        "imported": 0,
        "skipped": 2,
    }


@pytest.mark.asyncio
async def test_import_rejects_bad_rows(auth_client: AsyncClient) -> None:
    content = b"mainWord,translation1,section\nHaus,house,1\nBaum,,1\n"
    response = await auth_client.post(
        "/api/words/import", files={"file": ("words.csv", content, "text/csv")}
    )
    assert response.status_code == 400
    assert response.json()["detail"]["details"][0].startswith("Row 3:")
    assert (await auth_client.get("/api/words")).json() == []


class TestParseWordsCsv:
    def test_bom_and_flags(self) -> None:
        text = UTF8_BOM + "mainWord,translation2,section,important\nHaus,bari,1,yes\nBaum,gach,1,\n"
        parsed = parse_words_csv(text.encode())
        assert [row["main_word"] for row in parsed.rows] == ["Haus", "Baum"]
        assert [row["important"] for row in parsed.rows] == [True, False]
        assert parsed.rows[0]["translation1"] is None

    def test_missing_columns(self) -> None:
        with pytest.raises(CsvImportError, match="section"):
            parse_words_csv("mainWord,translation1\nHaus,house\n")

    def test_not_utf8(self) -> None:
        with pytest.raises(CsvImportError):
            parse_words_csv(b"mainWord,section\n\xff\xfe,1\n")
