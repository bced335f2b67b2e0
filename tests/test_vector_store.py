"""
Unit tests for the Qdrant vector store wrapper.

The QdrantClient is replaced with a Mock; tests check the calls made.
"""

import unittest
import uuid
from types import SimpleNamespace
from unittest.mock import Mock

from qdrant_client import models

from aeo_guru.clustering import ProjectPoint
from aeo_guru.store.vector_store import POINT_NAMESPACE, VectorStore, point_id_for


def record(pid, payload, vector=None):
    return SimpleNamespace(id=pid, payload=payload, vector=vector)


class TestPointIds(unittest.TestCase):

    def test_stable_uuid(self):
        key = "acme:https://acme.test/:chunk-0"
        self.assertEqual(point_id_for(key), point_id_for(key))
        self.assertEqual(point_id_for(key), str(uuid.uuid5(POINT_NAMESPACE, key)))

    def test_distinct_keys(self):
        self.assertNotEqual(point_id_for("a:chunk-0"), point_id_for("a:chunk-1"))


class TestVectorStore(unittest.TestCase):

    def setUp(self):
        self.client = Mock()
        self.store = VectorStore(collection="test_corpus", client=self.client)

    def test_uninitialized_store_raises(self):
        store = VectorStore(url="http://localhost:6333")
        self.assertFalse(store.initialized)
        with self.assertRaises(RuntimeError):
            _ = store.client

    def test_initialize_requires_url(self):
        with self.assertRaises(ValueError):
            VectorStore().initialize()

    def test_ensure_collection_creates_when_missing(self):
        self.client.get_collections.return_value = SimpleNamespace(collections=[])

        self.assertTrue(self.store.ensure_collection(768))

        _, kwargs = self.client.create_collection.call_args
        self.assertEqual(kwargs["collection_name"], "test_corpus")
        self.assertEqual(kwargs["vectors_config"].size, 768)
        self.assertEqual(kwargs["vectors_config"].distance, models.Distance.COSINE)

    def test_ensure_collection_existing(self):
        self.client.get_collections.return_value = SimpleNamespace(
            collections=[SimpleNamespace(name="test_corpus")]
        )
        self.assertFalse(self.store.ensure_collection(768))
        self.client.create_collection.assert_not_called()

    def test_upsert_points_in_batches(self):
        points = [ProjectPoint(id=point_id_for(f"k{i}"), payload={"i": i}, vector=[0.1, 0.2]) for i in range(5)]

        count = self.store.upsert_points(points, batch_size=2)

        self.assertEqual(count, 5)
        self.assertEqual(self.client.upsert.call_count, 3)
        first_batch = self.client.upsert.call_args_list[0].kwargs["points"]
        self.assertEqual(len(first_batch), 2)
        self.assertEqual(first_batch[0].payload, {"i": 0})

    def test_upsert_requires_vectors(self):
        with self.assertRaises(ValueError):
            self.store.upsert_points([ProjectPoint(id="x", payload={})])

    def test_scroll_pages_and_normalizes(self):
        self.client.scroll.side_effect = [
            ([record("a", {"url": "u1"}, [1.0, 0.0]), record("b", {"url": "u2"}, {"text": [0.0, 1.0]})], "next"),
            ([record("c", {"url": "u3"}, [[0.5, 0.5]])], None),
        ]

        points = self.store.scroll_points("acme", lang="en")

        self.assertEqual([p.id for p in points], ["a", "b", "c"])
        self.assertEqual(points[1].vector, [0.0, 1.0])
        self.assertEqual(points[2].vector, [0.5, 0.5])
        self.assertEqual(self.client.scroll.call_count, 2)

        _, kwargs = self.client.scroll.call_args_list[0]
        must = kwargs["scroll_filter"].must
        self.assertEqual(must[0].key, "projectId")
        self.assertEqual(must[0].match.value, "acme")
        self.assertEqual(must[1].key, "type")
        self.assertEqual(must[1].match.any, ["page_section"])
        self.assertEqual(must[2].key, "lang")
        self.assertEqual(self.client.scroll.call_args_list[1].kwargs["offset"], "next")

    def test_scroll_respects_limit(self):
        self.client.scroll.return_value = ([record(str(i), {}) for i in range(3)], "more")
        points = self.store.scroll_points("acme", with_vectors=False, limit=3)
        self.assertEqual(len(points), 3)
        self.assertEqual(self.client.scroll.call_count, 1)
        self.assertIsNone(points[0].vector)

    def test_scroll_all_types(self):
        self.client.scroll.return_value = ([], None)
        self.store.scroll_points("acme", types=None)
        must = self.client.scroll.call_args.kwargs["scroll_filter"].must
        self.assertEqual(len(must), 1)

    def test_set_payload(self):
        self.store.set_payload({"clusterId": "cluster-1"}, ("a", "b"))
        self.client.set_payload.assert_called_once_with(
            collection_name="test_corpus",
            payload={"clusterId": "cluster-1"},
            points=["a", "b"],
            wait=True,
        )

    def test_set_payload_no_points(self):
        self.store.set_payload({"clusterId": "cluster-1"}, [])
        self.client.set_payload.assert_not_called()

    def test_delete_project_points_by_type(self):
        self.store.delete_project_points("acme", types=iter(["query"]))

        selector = self.client.delete.call_args.kwargs["points_selector"]
        must = selector.filter.must
        self.assertEqual(must[0].match.value, "acme")
        self.assertEqual(must[1].match.any, ["query"])


if __name__ == '__main__':
    unittest.main()
