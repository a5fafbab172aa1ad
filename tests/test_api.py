import io

from docx import Document

BANK = "1. 一加一等于几？\nA. 1\nB. 2\n答案：B\n2. 水是无色的\n答案：对"


def test_health(client) -> None:
    assert client.get("/api/health").json() == {"status": "ok"}


def test_demo_bank_is_seeded(client) -> None:
    categories = client.get("/api/categories").json()
    assert categories == [{"id": "default", "name": "演示题库", "questionCount": 4}]

    types = client.get("/api/categories/default/types").json()
    assert [t["type"] for t in types] == ["single", "multiple", "judgment", "fill"]


def test_import_then_exam_flow(client) -> None:
    response = client.post(
        "/api/questions/import", json={"text": BANK, "categoryName": "算术"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["imported"] == 2
    category_id = body["category"]["id"]
    assert [q["type"] for q in body["questions"]] == ["single", "judgment"]

    view = client.post("/api/session/sequential", json={"categoryId": category_id}).json()
    assert view["total"] == 2
    assert view["isExam"] is True
    assert "answer" not in view["question"]

    client.post("/api/session/answer", json={"value": "B"})
    view = client.post("/api/session/advance", json={"delayMs": 0}).json()
    assert view["index"] == 1
    client.post("/api/session/answer", json={"value": "错误"})

    view = client.post("/api/session/submit").json()
    assert view["submitted"] is True
    assert view["result"]["score"] == 1
    assert view["question"]["answer"] == "对"

    wrong = client.get("/api/wrong").json()
    assert wrong["total"] == 1
    assert wrong["questions"][0]["wrongCount"] == 1

    history = client.get("/api/history").json()
    assert history[0]["mode"] == "sequential"
    assert history[0]["score"] == 1


def test_import_errors(client) -> None:
    response = client.post(
        "/api/questions/import", json={"text": "nothing here", "categoryName": "x"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "无法识别内容，请检查格式"

    response = client.post(
        "/api/questions/import", json={"text": BANK, "categoryName": "演示题库"}
    )
    assert response.status_code == 409

    response = client.post(
        "/api/questions/import", json={"text": BANK, "categoryId": "missing"}
    )
    assert response.status_code == 404


def test_upload_docx(client) -> None:
    doc = Document()
    for line in BANK.splitlines():
        doc.add_paragraph(line)
    buffer = io.BytesIO()
    doc.save(buffer)

    response = client.post(
        "/api/questions/upload",
        files={"file": ("bank.docx", buffer.getvalue(), "application/octet-stream")},
        data={"categoryName": "上传"},
    )
    assert response.status_code == 200
    assert response.json()["imported"] == 2
    assert any(line.startswith("识别题目") for line in response.json()["logs"])


def test_upload_rejects_unknown_format(client) -> None:
    response = client.post(
        "/api/questions/upload",
        files={"file": ("bank.pdf", b"%PDF", "application/pdf")},
        data={"categoryName": "pdf"},
    )
    assert response.status_code == 400


def test_random_exam_progress(client) -> None:
    view = client.post("/api/session/random", json={"categoryId": "default"}).json()
    assert view["kind"] == "random"
    assert view["total"] == 4

    response = client.delete("/api/session")
    assert response.status_code == 409
    assert client.get("/api/progress/default").json()["done"] == 0

    client.post("/api/session/submit")
    summary = client.get("/api/progress/default").json()
    assert summary["done"] == 4
    assert summary["percent"] == 100

    response = client.post("/api/session/random", json={"categoryId": "default"})
    assert response.status_code == 409

    view = client.post(
        "/api/session/random", json={"categoryId": "default", "resetProgress": True}
    ).json()
    assert view["title"] == "演示题库 - 随机模考"

    assert client.delete("/api/progress/default").json()["done"] == 0


def test_study_session_reveal(client) -> None:
    view = client.post(
        "/api/session/study", json={"categoryId": "default", "type": "multiple"}
    ).json()
    assert view["title"] == "演示题库 - 多选题"

    view = client.post("/api/session/answer", json={"value": "A"}).json()
    assert view["revealed"] is False
    response = client.post("/api/session/answer", json={"value": "AB"})
    assert response.status_code == 400
    view = client.post("/api/session/reveal").json()
    assert view["question"]["answer"] == "ABD"

    response = client.post("/api/session/submit")
    assert response.status_code == 400
    assert client.delete("/api/session").json() == {"status": "discarded"}
    assert client.get("/api/session").status_code == 404


def test_questions_search_and_delete(client) -> None:
    hits = client.get("/api/questions", params={"q": "光年"}).json()
    assert [q["id"] for q in hits] == ["2"]

    assert client.delete("/api/questions/2").status_code == 200
    assert client.delete("/api/questions/2").status_code == 404
    assert len(client.get("/api/questions", params={"categoryId": "default"}).json()) == 3


def test_wrong_book_management(client) -> None:
    client.post("/api/session/sequential", json={"categoryId": "default"})
    client.post("/api/session/submit")

    assert client.get("/api/wrong").json()["total"] == 4
    view = client.post("/api/session/wrong", json={}).json()
    assert view["title"] == "错题本 (全部)"

    assert client.delete("/api/wrong/1").status_code == 200
    response = client.delete("/api/wrong/categories/default", params={"type": "judgment"})
    assert response.json()["removed"] == 1
    assert client.get("/api/wrong").json()["total"] == 2


def test_snapshot_export_and_restore(client) -> None:
    snapshot = client.get("/api/snapshot").json()
    assert set(snapshot) == {"questions", "categories", "userState"}

    client.delete("/api/categories/default")
    assert client.get("/api/categories").json() == []

    response = client.put("/api/snapshot", json=snapshot)
    assert response.json()["questions"] == 4
    assert len(client.get("/api/categories").json()) == 1

    response = client.put("/api/snapshot", json={"questions": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "无效的备份数据"
