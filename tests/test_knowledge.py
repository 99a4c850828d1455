"""Tests for the package knowledge base."""

import pytest

from sightglass.analyzers import RiskScorer, score_risks
from sightglass.classifier import PatternClassifier, classify_events
from sightglass.exceptions import KnowledgeBaseError
from sightglass.knowledge import DEFAULT_KNOWLEDGE_BASE, load_knowledge_base
from sightglass.schemas.analysis import RiskFactorType, RiskLevel, RiskSeverity
from sightglass.schemas.events import Action, DiscoveryType, PackageManager


class TestDefaultKnowledgeBase:
    """Test the built-in snapshot."""

    def test_known_issue_entries(self):
        """The snapshot carries typed risk factors."""
        jwt = DEFAULT_KNOWLEDGE_BASE.known_issues["jsonwebtoken"]
        assert jwt.type == RiskFactorType.VULNERABILITY
        assert jwt.severity == RiskSeverity.ERROR
        assert jwt.suggested_alternative == "jose"
        assert DEFAULT_KNOWLEDGE_BASE.known_issues["moment"].type == RiskFactorType.DEPRECATED

    def test_training_weight(self):
        """High-weight lookups are per manager."""
        assert DEFAULT_KNOWLEDGE_BASE.is_high_training_weight("flask", PackageManager.PIP)
        assert not DEFAULT_KNOWLEDGE_BASE.is_high_training_weight("flask", PackageManager.NPM)
        assert DEFAULT_KNOWLEDGE_BASE.is_high_training_weight(
            "github.com/gorilla/mux", PackageManager.GO
        )

    def test_directive_terms(self):
        """Aliases extend the package name; unknown packages get just their name."""
        assert DEFAULT_KNOWLEDGE_BASE.directive_terms("pg") == ("pg", "postgres", "postgresql")
        assert DEFAULT_KNOWLEDGE_BASE.directive_terms("zod") == ("zod",)

    def test_tables_immutable(self):
        """The snapshot cannot be modified in place."""
        with pytest.raises(TypeError):
            DEFAULT_KNOWLEDGE_BASE.known_issues["left-pad"] = None  # type: ignore[index]


class TestLoadKnowledgeBase:
    """Test YAML knowledge base loading."""

    def test_partial_document_keeps_defaults(self, knowledge_yaml):
        """Omitted sections keep the built-in data."""
        knowledge = load_knowledge_base(knowledge_yaml)
        assert set(knowledge.known_issues) == {"left-pad"}
        assert knowledge.known_issues["left-pad"].severity == RiskSeverity.CRITICAL
        assert knowledge.is_high_training_weight("express", PackageManager.NPM)
        assert "postgres" in knowledge.directive_terms("pg")

    def test_loaded_knowledge_drives_scoring(self, knowledge_yaml, make_event):
        """Custom known issues are used by the risk scorer."""
        knowledge = load_knowledge_base(knowledge_yaml)
        classified = classify_events(
            [make_event(Action.BASH, "npm install left-pad", exit_code=0)]
        )
        (assessment,) = score_risks(classified, scorer=RiskScorer(knowledge=knowledge))
        assert assessment.risk_level == RiskLevel.CRITICAL

    def test_custom_aliases_drive_classification(self, tmp_path, make_event):
        """Custom directive aliases are honored by the classifier."""
        path = tmp_path / "kb.yaml"
        path.write_text("directive_aliases:\n  knex:\n    - query builder\n")
        classifier = PatternClassifier(knowledge=load_knowledge_base(path))
        events = [
            make_event(Action.FILE_READ, ".cursorrules", result="Use a query builder, not an ORM."),
            make_event(Action.BASH, "npm install knex", exit_code=0),
        ]
        install = classifier.classify(events)[-1]
        assert install.classification == DiscoveryType.USER_DIRECTED

    def test_empty_file_is_default(self, tmp_path):
        """An empty document is the built-in snapshot."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert set(load_knowledge_base(path).known_issues) == set(
            DEFAULT_KNOWLEDGE_BASE.known_issues
        )

    def test_missing_file(self, tmp_path):
        """Unreadable files raise KnowledgeBaseError."""
        with pytest.raises(KnowledgeBaseError, match="Cannot read"):
            load_knowledge_base(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Broken YAML raises KnowledgeBaseError."""
        path = tmp_path / "broken.yaml"
        path.write_text("known_issues: [unclosed\n")
        with pytest.raises(KnowledgeBaseError):
            load_knowledge_base(path)

    def test_schema_violation(self, tmp_path):
        """Unknown severities fail validation."""
        path = tmp_path / "bad.yaml"
        path.write_text(
            "known_issues:\n  x:\n    type: bloat\n    severity: catastrophic\n    detail: d\n"
        )
        with pytest.raises(KnowledgeBaseError, match="Invalid knowledge base"):
            load_knowledge_base(path)
