"""
Tests for the sample Flask server.
"""

import io

import pytest

from recognizeim.server.app import ROUTES, create_app
from recognizeim.server.handlers import format_recognition

from conftest import json_response, make_image, make_png_header, make_response, soap_result


@pytest.fixture
def app(authenticated_client):
    app = create_app(authenticated_client)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def web(app):
    return app.test_client()


def upload(data, **fields):
    form = dict(fields)
    form["upload"] = (io.BytesIO(data), "query.jpg")
    return form


class TestRouting:

    def test_route_table(self):
        assert set(ROUTES) == {"/", "/start", "/recognize", "/status", "/build", "/list", "/imageInsert"}

    @pytest.mark.parametrize("path", ["/", "/start"])
    def test_start_page(self, web, path):
        response = web.get(path)
        assert response.status_code == 200
        assert response.mimetype == "text/html"
        body = response.get_data(as_text=True)
        assert 'action="/recognize"' in body
        assert 'action="/imageInsert"' in body
        assert 'href="/build"' in body

    def test_unknown_path(self, web):
        assert web.get("/nope").status_code == 404


class TestRecognizeHandler:

    def test_reports_recognized_id(self, web, http):
        http.queue_response(json_response({"status": 0, "id": "painting-1"}))

        response = web.post("/recognize", data=upload(make_image(640, 480)),
                            content_type="multipart/form-data")

        assert response.status_code == 200
        assert response.mimetype == "text/plain"
        assert response.get_data(as_text=True) == "painting-1\n"
        assert http.paths == ["/v2/recognize/single/64"]

    def test_mode_flags(self, web, http):
        http.queue_response(json_response({"status": 0, "objects": [{"id": "a"}, {"id": "b"}]}))

        response = web.post("/recognize", data=upload(make_image(1600, 1200), multi="on", allResults="on"),
                            content_type="multipart/form-data")

        assert http.paths == ["/v2/recognize/multi/all/64"]
        assert response.get_data(as_text=True) == "a, b\n"

    def test_limit_violation_message(self, web, http):
        response = web.post("/recognize", data=upload(make_image(50, 50)),
                            content_type="multipart/form-data")

        assert http.requests == []
        assert "does not meet the requirements of single mode" in response.get_data(as_text=True)

    def test_oversized_image_message(self, web, http):
        response = web.post("/recognize", data=upload(make_png_header(20000, 20000), multi="on"),
                            content_type="multipart/form-data")

        assert response.status_code == 200
        assert http.requests == []
        assert "does not meet the requirements of multi mode" in response.get_data(as_text=True)

    def test_non_object_result(self, web, http):
        http.queue_response(json_response(["unexpected", "shape"]))

        response = web.post("/recognize", data=upload(make_image(640, 480)),
                            content_type="multipart/form-data")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "['unexpected', 'shape']\n"

    def test_missing_upload(self, web):
        response = web.post("/recognize", data={}, content_type="multipart/form-data")
        assert response.status_code == 400


class TestManagementHandlers:

    def test_image_insert(self, web, http):
        http.queue_response(make_response(soap_result("imageInsert", {"status": 0})))

        response = web.post("/imageInsert", data=upload(make_image(320, 240), id="7", name="Cat"),
                            content_type="multipart/form-data")

        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Image uploaded!"
        assert http.paths == ["/imageInsert"]

    def test_image_insert_error(self, web, http):
        http.queue_response(make_response(soap_result("imageInsert", {"status": 1, "message": "Limit <reached>"})))

        response = web.post("/imageInsert", data=upload(make_image(320, 240), id="7", name="Cat"),
                            content_type="multipart/form-data")

        assert response.status_code == 500
        assert response.get_data(as_text=True) == "Limit &lt;reached&gt;"

    def test_status(self, web, http):
        http.queue_response(make_response(soap_result("indexStatus", {"status": 0, "data": {"needUpdate": 1}})))

        response = web.get("/status")

        assert response.status_code == 200
        assert "needUpdate" in response.get_data(as_text=True)

    def test_build_links_to_status(self, web, http):
        http.queue_response(make_response(soap_result("indexBuild", {"status": 0})))

        response = web.get("/build")

        assert response.status_code == 200
        assert '<a href="/status">Status</a>' in response.get_data(as_text=True)

    def test_build_error(self, web, http):
        http.queue_response(make_response(soap_result("indexBuild", {"status": 3, "message": "Nothing to build"})))

        response = web.get("/build")

        assert response.status_code == 500
        assert response.get_data(as_text=True) == "Nothing to build"

    def test_list_table(self, web, http):
        images = [{"id": "a", "name": "First", "href": "http://img/a"},
                  {"id": "b", "name": "Second", "href": "http://img/b"}]
        http.queue_response(make_response(soap_result("imageList", {"status": 0, "data": images})))

        body = web.get("/list").get_data(as_text=True)

        assert body.startswith("<table>")
        assert body.count("<tr><td>") == 2
        assert '<img src="http://img/b?w=100&h=100"/>' in body

    def test_list_empty(self, web, http):
        http.queue_response(make_response(soap_result("imageList", {"status": 0})))

        body = web.get("/list").get_data(as_text=True)

        assert body == "<table><tr><th>ID</th><th>Name</th><th>Image</th></tr></table>"


class TestFormatRecognition:

    def test_single_id(self):
        assert format_recognition({"status": 0, "id": 12}) == "12"

    def test_failure_message(self):
        assert format_recognition({"status": 1, "message": "No match"}) == "No match"

    def test_no_objects(self):
        assert format_recognition({"status": 0, "objects": []}) == "No objects recognized"

    @pytest.mark.parametrize("result, expected", [
        (["a", "b"], "['a', 'b']"),
        ("plain text", "plain text"),
        (42, "42"),
        (None, "None"),
    ])
    def test_non_object_results(self, result, expected):
        assert format_recognition(result) == expected

    def test_non_object_members(self):
        assert format_recognition({"status": 0, "objects": [{"id": "a"}, "b", 3]}) == "a, b, 3"
