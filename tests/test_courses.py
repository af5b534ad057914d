from app.models import Chapter, Course, Purchase, VideoAsset


def _create_course(client, admin_headers, title="New Course") -> dict:
    resp = client.post("/v1/courses", headers=admin_headers, json={"title": title})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_category(client, admin_headers, name="Design") -> str:
    resp = client.post("/v1/categories", headers=admin_headers, json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()["id"]


def test_create_course_starts_unpublished(client, admin_headers):
    course = _create_course(client, admin_headers, "  Python 101  ")

    assert course["title"] == "Python 101"
    assert course["publish_flag"] is False
    assert course["price"] is None
    assert course["category"] is None


def test_create_course_requires_title(client, admin_headers):
    resp = client.post("/v1/courses", headers=admin_headers, json={"title": ""})
    assert resp.status_code == 422


def test_publish_course_walkthrough(client, admin_headers):
    course = _create_course(client, admin_headers)
    base = f"/v1/courses/{course['id']}"

    resp = client.put(f"{base}/publish", headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["code"] == "COURSE_REQUIRED_FIELDS_EMPTY"

    category_id = _create_category(client, admin_headers)
    updates = [
        ("description", {"description": "All about design"}),
        ("thumbnail", {"image_url": "https://images.example.com/design.png"}),
        ("price", {"price": 0}),
        ("category", {"category_id": category_id}),
    ]
    for suffix, body in updates:
        resp = client.put(f"{base}/{suffix}", headers=admin_headers, json=body)
        assert resp.status_code == 200, resp.text

    resp = client.put(f"{base}/publish", headers=admin_headers)
    assert resp.status_code == 400
    assert "published_chapter" in resp.json()["error"]

    chapter = client.post(f"{base}/chapters", headers=admin_headers, json={"title": "Welcome"}).json()
    chapter_base = f"{base}/chapters/{chapter['id']}"
    client.put(f"{chapter_base}/description", headers=admin_headers, json={"description": "Hello"})
    client.put(f"{chapter_base}/video", headers=admin_headers, json={"video_url": "https://videos.example.com/w.mp4"})
    assert client.put(f"{chapter_base}/publish", headers=admin_headers).status_code == 200

    resp = client.put(f"{base}/publish", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["publish_flag"] is True
    assert body["category"]["name"] == "Design"

    resp = client.put(f"{base}/unpublish", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["publish_flag"] is False


def test_update_course_with_unknown_category_is_404(client, admin_headers):
    course = _create_course(client, admin_headers)

    resp = client.put(f"/v1/courses/{course['id']}/category", headers=admin_headers, json={"category_id": "nope"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Category not found", "code": "CATEGORY_NOT_FOUND"}


def test_partial_update_changes_only_given_fields(client, admin_headers):
    course = _create_course(client, admin_headers, "Original")

    resp = client.put(
        f"/v1/courses/{course['id']}",
        headers=admin_headers,
        json={"description": "Fresh", "price": 2500, "source_url": "https://github.com/example/repo"},
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["title"] == "Original"
    assert body["description"] == "Fresh"
    assert body["price"] == 2500
    assert body["source_url"] == "https://github.com/example/repo"


def test_price_outside_range_is_rejected(client, admin_headers):
    course = _create_course(client, admin_headers)
    url = f"/v1/courses/{course['id']}/price"

    assert client.put(url, headers=admin_headers, json={"price": -1}).status_code == 422
    assert client.put(url, headers=admin_headers, json={"price": 1_000_001}).status_code == 422


def test_thumbnail_must_be_a_url(client, admin_headers):
    course = _create_course(client, admin_headers)
    resp = client.put(f"/v1/courses/{course['id']}/thumbnail", headers=admin_headers, json={"image_url": "not a url"})
    assert resp.status_code == 422


def test_update_missing_course_is_404(client, admin_headers):
    resp = client.put("/v1/courses/missing/title", headers=admin_headers, json={"title": "Anything"})
    assert resp.status_code == 404
    assert resp.json()["code"] == "COURSE_NOT_FOUND"


def test_admin_list_includes_chapters_and_purchase_count(client, admin_headers, make_course, db):
    course, chapter = make_course(title="Listed")
    _create_course(client, admin_headers, "Draft only")
    db.add(Purchase(course_id=course.id, user_id="buyer-1"))
    db.add(Purchase(course_id=course.id, user_id="buyer-2"))
    db.commit()

    resp = client.get("/v1/courses", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total"] == 2
    assert [c["title"] for c in body["courses"]] == ["Draft only", "Listed"]
    listed = body["courses"][1]
    assert listed["purchase_count"] == 2
    assert [c["id"] for c in listed["chapters"]] == [chapter.id]

    resp = client.get(f"/v1/courses/{course.id}", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["purchase_count"] == 2


def test_published_listing_filters_and_purchased_flag(client, user_headers, make_course, db):
    python, _ = make_course(title="Python Basics", category_name="Programming")
    design, _ = make_course(title="Design Systems", category_name="Design")
    make_course(title="Hidden Draft", category_name="Drafts", publish=False)
    db.add(Purchase(course_id=python.id, user_id="user-1"))
    db.commit()

    resp = client.get("/v1/courses/publish", headers=user_headers)
    assert resp.status_code == 200, resp.text
    courses = {c["title"]: c for c in resp.json()["courses"]}
    assert set(courses) == {"Python Basics", "Design Systems"}
    assert courses["Python Basics"]["purchased"] is True
    assert courses["Design Systems"]["purchased"] is False

    resp = client.get("/v1/courses/publish", headers=user_headers, params={"title": "python"})
    assert [c["title"] for c in resp.json()["courses"]] == ["Python Basics"]

    resp = client.get("/v1/courses/publish", headers=user_headers, params={"category_id": design.category_id})
    assert [c["title"] for c in resp.json()["courses"]] == ["Design Systems"]


def test_published_listing_hides_unpublished_chapters(client, user_headers, make_course, db):
    course, _ = make_course()
    db.add(Chapter(course_id=course.id, title="Draft chapter", position=2, publish_flag=False))
    db.commit()

    resp = client.get(f"/v1/courses/publish/{course.id}", headers=user_headers)
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert [c["title"] for c in body["chapters"]] == ["Getting started"]
    assert body["chapters"][0]["video_asset"]["playback_id"].startswith("playback-")
    assert body["purchased"] is False


def test_get_published_course_404_cases(client, user_headers, make_course, db):
    draft, _ = make_course(title="Draft", category_name="One", publish=False)
    assert client.get(f"/v1/courses/publish/{draft.id}", headers=user_headers).status_code == 404
    assert client.get("/v1/courses/publish/missing", headers=user_headers).status_code == 404

    # Published flag set but no chapter published: still hidden.
    orphan, chapter = make_course(title="Orphan", category_name="Two")
    db.query(Chapter).filter_by(id=chapter.id).update({"publish_flag": False})
    db.commit()
    resp = client.get(f"/v1/courses/publish/{orphan.id}", headers=user_headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "COURSE_NOT_FOUND"


def test_purchased_courses_lists_only_own_purchases(client, user_headers, make_course, db):
    mine, _ = make_course(title="Mine", category_name="A")
    other, _ = make_course(title="Other", category_name="B")
    db.add(Purchase(course_id=mine.id, user_id="user-1"))
    db.add(Purchase(course_id=other.id, user_id="user-2"))
    db.commit()

    resp = client.get("/v1/courses/purchased", headers=user_headers)
    assert resp.status_code == 200, resp.text
    courses = resp.json()["courses"]
    assert [c["title"] for c in courses] == ["Mine"]
    assert len(courses[0]["chapters"]) == 1


def test_delete_course_removes_rows_and_hosted_assets(client, admin_headers, make_course, add_chapter, video, db):
    course, first = make_course()
    second = add_chapter(course.id, "Second")
    db.add(Purchase(course_id=course.id, user_id="buyer"))
    db.commit()
    asset_ids = sorted(asset.asset_id for asset in db.query(VideoAsset).all())
    course_id, chapter_ids = course.id, [first.id, second.id]

    resp = client.delete(f"/v1/courses/{course_id}", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["id"] == course_id
    assert sorted(video.deleted) == asset_ids

    db.expire_all()
    assert db.get(Course, course_id) is None
    assert db.query(Chapter).filter(Chapter.id.in_(chapter_ids)).count() == 0
    assert db.query(VideoAsset).count() == 0
    assert db.query(Purchase).count() == 0

    assert client.delete(f"/v1/courses/{course_id}", headers=admin_headers).status_code == 404


def test_admin_endpoints_reject_missing_and_non_admin_tokens(client, user_headers, token_headers):
    resp = client.get("/v1/courses")
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHENTICATED"

    resp = client.post("/v1/courses", headers=user_headers, json={"title": "Nope"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHORIZED"

    resp = client.get("/v1/courses", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "UNAUTHENTICATED"

    assert client.get("/v1/courses/publish", headers=token_headers("someone")).status_code == 200


def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_blank_text_cannot_empty_a_published_course(client, admin_headers, make_course, db):
    course, _ = make_course()
    course_id = course.id

    for suffix, body in (("title", {"title": "   "}), ("description", {"description": " \t "})):
        resp = client.put(f"/v1/courses/{course_id}/{suffix}", headers=admin_headers, json=body)
        assert resp.status_code == 422, resp.text
    resp = client.put(f"/v1/courses/{course_id}", headers=admin_headers, json={"description": "  "})
    assert resp.status_code == 422
    assert client.post("/v1/courses", headers=admin_headers, json={"title": "  "}).status_code == 422

    db.expire_all()
    stored = db.get(Course, course_id)
    assert stored.publish_flag is True
    assert stored.title == "Intro to Python"
    assert stored.description == "Learn the basics"


def test_title_filter_treats_wildcards_literally(client, user_headers, make_course):
    make_course(title="Python Basics", category_name="Programming")
    make_course(title="100% Design", category_name="Design")

    resp = client.get("/v1/courses/publish", headers=user_headers, params={"title": "%"})
    assert [c["title"] for c in resp.json()["courses"]] == ["100% Design"]

    resp = client.get("/v1/courses/publish", headers=user_headers, params={"title": "_"})
    assert resp.json()["courses"] == []
