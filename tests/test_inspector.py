"""Tests for the object inspector."""

from leakscope.extraction.accumulator import ScanAccumulator
from leakscope.extraction.inspector import ObjectInspector
from leakscope.models import Provider

from tests.conftest import FIREBASE_KEY, SUPABASE_URL


class Node:
    """Plain object whose repr leaks nothing."""

    def __init__(self, **attrs):
        self.__dict__.update(attrs)

    def __str__(self):
        return "<Node>"


def _chain(depth: int, leaf: Node) -> Node:
    node = leaf
    for _ in range(depth):
        node = Node(config=node)
    return node


class TestObjectInspector:
    """Test traversal, shape signatures and bounds."""

    def test_next_data_props(self, anon_token):
        acc = ScanAccumulator()
        value = {"props": {"pageProps": {"supabaseUrl": SUPABASE_URL, "supabaseAnonKey": anon_token}}}
        ObjectInspector(acc).inspect(value, "window.__NEXT_DATA__")
        assert acc.result.supabase.base_url == SUPABASE_URL
        assert acc.result.supabase.anon_key == anon_token
        assert "window.__NEXT_DATA__" in acc.result.sources

    def test_client_object_attributes(self, service_token):
        acc = ScanAccumulator()
        client = Node(supabaseUrl=SUPABASE_URL, supabaseKey=service_token)
        ObjectInspector(acc).inspect(client, "window.supabase")
        # Classification outranks the anon-looking field name
        assert acc.result.supabase.service_key == service_token
        assert acc.result.supabase.anon_key is None

    def test_firebase_config_shape(self):
        acc = ScanAccumulator()
        config = {"apiKey": FIREBASE_KEY, "authDomain": "my-app.firebaseapp.com", "projectId": "my-app"}
        ObjectInspector(acc).inspect({"firebase": config}, "window.app")
        record = acc.result.firebase
        assert record.api_key == FIREBASE_KEY
        assert record.project_id == "my-app"
        assert record.config["authDomain"] == "my-app.firebaseapp.com"
        assert acc.result.primary_provider == Provider.FIREBASE

    def test_depth_bound(self):
        shallow = ScanAccumulator()
        ObjectInspector(shallow, max_depth=4).inspect(_chain(2, Node(supabaseUrl=SUPABASE_URL)), "w")
        assert shallow.result.supabase.base_url == SUPABASE_URL

        deep = ScanAccumulator()
        ObjectInspector(deep, max_depth=4).inspect(_chain(6, Node(supabaseUrl=SUPABASE_URL)), "w")
        assert deep.result.supabase.base_url is None

    def test_only_allowlisted_properties_followed(self):
        acc = ScanAccumulator()
        ObjectInspector(acc).inspect(Node(secret=Node(supabaseUrl=SUPABASE_URL)), "w")
        assert not acc.result.detected

    def test_cycles_terminate(self):
        acc = ScanAccumulator()
        value = {"supabaseUrl": SUPABASE_URL}
        value["config"] = value
        ObjectInspector(acc).inspect(value, "window.config")
        assert acc.result.supabase.base_url == SUPABASE_URL

    def test_skips_none_and_callables(self):
        acc = ScanAccumulator()
        inspector = ObjectInspector(acc)
        inspector.inspect(None, "a")
        inspector.inspect(lambda: SUPABASE_URL, "b")
        assert not acc.result.detected
