# tests/test_project.py
import json
import unittest

from mdxforge.core.codec import DELIMITER
from mdxforge.core.config import ForgeConfig
from mdxforge.core.errors import DelimiterCollisionError, DocumentShapeError, JSONRecoveryFailure
from mdxforge.core.events import ChangeEventBus
from mdxforge.core.models import NamedDocument, OperationKind
from mdxforge.core.project import DocProject
from snapstore import InMemorySnapshotStore, StaleSnapshotError


GENERATION_RESPONSE = "```json\n" + json.dumps([
    {"filename": "introduction.mdx", "content": "# Introduction\n\nWelcome.\n\n## Base URL"},
    {"filename": "authentication.mdx", "content": "# Authentication\n\nBearer token."},
]) + "\n```"


class TestDocProject(unittest.TestCase):

    def setUp(self):
        self.store = InMemorySnapshotStore()
        self.config = ForgeConfig(project_id="payments", project_title="Payments API")
        self.project = DocProject("payments", self.store, config=self.config)

    def _generate(self):
        return self.project.import_generation(GENERATION_RESPONSE)

    def test_new_project_is_empty(self):
        self.assertEqual(self.project.documents(), [])
        self.assertEqual(self.project.outline(), [])
        self.assertEqual(len(self.project.history), 0)

    def test_import_generation(self):
        snapshot = self._generate()

        self.assertEqual([d.filename for d in self.project.documents()], ["introduction.mdx", "authentication.mdx"])
        self.assertEqual(self.store.latest_snapshot("payments"), snapshot)
        self.assertEqual(self.project.outline()[0].children[0].title, "Base URL")

    def test_import_generation_rejects_unreadable_response(self):
        with self.assertRaises(JSONRecoveryFailure):
            self.project.import_generation('[{"filename": "a.mdx", "content": ')
        with self.assertRaises(DocumentShapeError):
            self.project.import_generation("Sorry, I cannot help with that.")
        with self.assertRaises(DocumentShapeError):
            self.project.import_generation("[]")
        self.assertEqual(len(self.project.history), 0)

    def test_import_generation_markdown_fallback(self):
        config = ForgeConfig(project_id="payments", project_title="Payments API", markdown_fallback=True)
        project = DocProject("payments", self.store, config=config)

        project.import_generation("# Introduction\nWelcome\n# Errors\nCodes")

        self.assertEqual([d.filename for d in project.documents()], ["introduction.mdx", "errors.mdx"])

    def test_apply_chat_response_marker_block(self):
        self._generate()
        message = "MDX_UPDATE_START\nfilename: authentication.mdx\ncontent:\n# Authentication\n\nUse API keys.\nMDX_UPDATE_END"

        result = self.project.apply_chat_response(message)

        self.assertTrue(result.applied)
        self.assertEqual(result.operation.kind, OperationKind.UPDATE)
        self.assertEqual(self.project.document("authentication.mdx").content, "# Authentication\n\nUse API keys.")
        self.assertEqual(len(self.project.history), 2)

    def test_apply_chat_response_without_edit(self):
        self._generate()

        result = self.project.apply_chat_response("Authentication uses bearer tokens.")

        self.assertEqual(result.status, "no_edit")
        self.assertIsNone(result.snapshot)
        self.assertEqual(len(self.project.history), 1)

    def test_apply_chat_response_heuristic_uses_scope(self):
        self._generate()
        message = "Here's the fix:\n```mdx\n# Authentication\n\n<Note>Keys expire.</Note>\n```"

        result = self.project.apply_chat_response(message, files_in_scope=["authentication.mdx"])

        self.assertEqual(result.operation.source, "heuristic")
        self.assertIn("<Note>", self.project.document("authentication.mdx").content)

    def test_revert_is_a_view_until_committed(self):
        first = self._generate()
        self.project.write_document("introduction.mdx", "# Introduction\n\nChanged.")

        documents = self.project.revert(1)

        self.assertEqual(documents[0].content, "# Introduction\n\nWelcome.\n\n## Base URL")
        self.assertEqual(self.project.documents(), documents)
        self.assertEqual(len(self.project.history), 2)
        self.assertEqual(len(self.store.list_snapshots("payments")), 2)

        restored = self.project.commit_current()

        self.assertEqual(restored.full_text, first.full_text)
        self.assertNotEqual(restored.id, first.id)
        self.assertEqual(len(self.project.history), 3)
        self.assertTrue(self.project.history.is_viewing_latest)

    def test_identical_save_is_skipped(self):
        first = self._generate()
        again = self.project.save(self.project.documents())

        self.assertIs(again, first)
        self.assertEqual(len(self.store.list_snapshots("payments")), 1)

    def test_identical_save_can_be_stored(self):
        config = ForgeConfig(project_id="payments", project_title="Payments API", skip_identical=False)
        project = DocProject("payments", self.store, config=config)
        project.save([NamedDocument("a.mdx", "A")])
        project.save([NamedDocument("a.mdx", "A")])
        self.assertEqual(len(self.store.list_snapshots("payments")), 2)

    def test_optimistic_save_detects_concurrent_writer(self):
        self._generate()
        other = DocProject("payments", self.store, config=self.config)
        other.write_document("errors.mdx", "# Errors")

        with self.assertRaises(StaleSnapshotError):
            self.project.save([NamedDocument("a.mdx", "A")], optimistic=True)

        self.project.reload()
        self.project.save([NamedDocument("a.mdx", "A")], optimistic=True)
        self.assertEqual(self.project.documents(), [NamedDocument("a.mdx", "A")])

    def test_last_write_wins_without_optimistic(self):
        self._generate()
        other = DocProject("payments", self.store, config=self.config)
        other.write_document("errors.mdx", "# Errors")

        self.project.write_document("faq.mdx", "# FAQ")

        latest = DocProject("payments", self.store, config=self.config)
        names = [d.filename for d in latest.documents()]
        self.assertIn("faq.mdx", names)
        self.assertNotIn("errors.mdx", names)

    def test_change_events_are_emitted(self):
        bus = ChangeEventBus()
        project = DocProject("payments", self.store, config=self.config, event_bus=bus)
        received = []
        bus.on_change("payments", lambda project_id, snapshot: received.append((project_id, snapshot.id)))

        snapshot = project.save([NamedDocument("a.mdx", "A")])

        self.assertEqual(received, [("payments", snapshot.id)])

    def test_delimiter_in_content_is_rejected(self):
        with self.assertRaises(DelimiterCollisionError):
            self.project.write_document("a.mdx", "one" + DELIMITER + "two")

    def test_file_management(self):
        self._generate()

        doc = self.project.add_section("Rate Limits")
        self.assertEqual(doc.filename, "rate-limits.mdx")
        with self.assertRaises(ValueError):
            self.project.add_section("rate limits")

        self.project.reorder(["rate-limits.mdx"])
        self.assertEqual(self.project.documents()[0].filename, "rate-limits.mdx")

        self.assertEqual(self.project.delete_document("rate-limits.mdx"), "introduction.mdx")
        self.assertIsNone(self.project.delete_document("rate-limits.mdx"))
        self.project.delete_document("introduction.mdx")
        self.assertEqual(self.project.delete_document("authentication.mdx"), "")
        self.assertEqual(self.project.documents(), [])


def test_outline_follows_viewed_version(project, sample_documents):
    project.save(sample_documents)
    project.save(sample_documents[:1])

    assert [node.id for node in project.outline()] == ["introduction"]

    project.revert(1)

    assert [node.id for node in project.outline()] == ["introduction", "authentication"]
    assert project.outline()[1].children[0].children[0].id == "creating-a-key"


def test_history_is_rebuilt_from_store(project, memory_store, forge_config, sample_documents):
    first = project.save(sample_documents)
    second = project.write_document("errors.mdx", "# Errors")

    reopened = DocProject("payments", memory_store, config=forge_config)

    assert [s.id for s in reopened.history] == [second.id, first.id]
    assert reopened.document("errors.mdx").content == "# Errors"


def test_history_max_length_bounds_view_only(memory_store, sample_documents):
    config = ForgeConfig(project_id="payments", project_title="Payments API", history_max_length=2)
    project = DocProject("payments", memory_store, config=config)
    for index in range(3):
        project.write_document("changelog.mdx", f"# Changelog\n\nv{index}")

    assert len(project.history) == 2
    assert len(memory_store.list_snapshots("payments")) == 3


if __name__ == '__main__':
    unittest.main()
