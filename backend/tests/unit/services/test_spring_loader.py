"""
Unit Tests for the Model Loader and Naming Rules
"""
import pytest

from app.core.exceptions import DiagramValidationError
from app.schemas.diagram_model import AttributeType, DiagramModel
from app.services.spring_generator.loader import load_diagram, resolve_names, unwrap_model_payload
from app.services.spring_generator.naming import java_type, lower_first, plural, sanitize_class_name


class TestNaming:
    """Test identifier helpers"""

    def test_sanitize_strips_non_alphanumerics(self):
        """Test labels become Java identifiers"""
        assert sanitize_class_name("line item") == "Lineitem"
        assert sanitize_class_name("order-detail") == "Orderdetail"
        assert sanitize_class_name("user") == "User"
        assert sanitize_class_name("OrderItem") == "OrderItem"

    def test_sanitize_empty_result(self):
        """Test labels without letters or digits sanitize to empty"""
        assert sanitize_class_name("!!!") == ""
        assert sanitize_class_name("") == ""

    def test_lower_first_and_plural(self):
        """Test derived field names"""
        assert lower_first("OrderItem") == "orderItem"
        assert plural("orderItem") == "orderItems"
        assert lower_first("") == ""

    def test_java_type_mapping(self):
        """Test only int and long get numeric Java types"""
        assert java_type(AttributeType.INT) == "Integer"
        assert java_type(AttributeType.LONG) == "Long"
        assert java_type(AttributeType.STRING) == "String"
        assert java_type(AttributeType.BOOLEAN) == "String"
        assert java_type(AttributeType.OTHER) == "String"


class TestLoadDiagram:
    """Test payload validation"""

    def test_unwrap_model_payload(self):
        """Test wrapped and bare payloads are both accepted"""
        model = {"nodes": [], "edges": []}
        assert unwrap_model_payload({"model": model}) is model
        assert unwrap_model_payload(model) is model

    def test_none_is_empty_model(self):
        """Test a missing model is an empty diagram"""
        diagram = load_diagram(None)
        assert diagram.nodes == []
        assert diagram.edges == []

    def test_validated_model_passes_through(self):
        """Test an already validated model is returned as is"""
        diagram = DiagramModel()
        assert load_diagram(diagram) is diagram

    def test_errors_carry_locations(self):
        """Test validation problems are reported per location"""
        raw = {
            "nodes": [{"id": "n1", "data": {"label": "A", "attributes": [{"name": "", "type": "int"}]}}],
        }

        with pytest.raises(DiagramValidationError) as exc_info:
            load_diagram(raw)

        error = exc_info.value
        assert error.code == "INVALID_DIAGRAM_MODEL"
        assert error.http_status == 422
        assert error.errors
        assert error.errors[0]["loc"] == "nodes.0.attributes.0.name"
        assert "message" in error.errors[0]
        assert error.details["errors"] == error.errors


class TestResolveNames:
    """Test the id -> identifier tables"""

    def test_tables(self, builder):
        """Test class names, attributes and association classes"""
        user = builder.node("user account", ("id", "int"), ("name", "string"))
        purchase = builder.node("Purchase", association_class=True)
        resolved = resolve_names(load_diagram(builder.build()))

        assert resolved.class_names == {user: "Useraccount", purchase: "Purchase"}
        assert resolved.ordered_names == ["Useraccount", "Purchase"]
        assert [a.name for a in resolved.attributes["Useraccount"]] == ["id", "name"]
        assert resolved.association_classes == {"Purchase"}

    def test_resolve_unknown_id(self, builder):
        """Test unknown node ids resolve to None"""
        builder.node("User")
        resolved = resolve_names(load_diagram(builder.build()))

        assert resolved.resolve("missing") is None
        assert resolved.resolve(None) is None

    def test_empty_identifier_passes_through(self, builder, caplog):
        """Test a label that sanitizes to nothing is kept verbatim"""
        node = builder.node("!!!")
        resolved = resolve_names(load_diagram(builder.build()))

        assert resolved.resolve(node) == "!!!"
        assert "sanitizes to an empty identifier" in caplog.text

    def test_colliding_identifiers(self, builder, caplog):
        """Test the later node's attributes win and order is kept"""
        first = builder.node("User", ("name", "string"))
        builder.node("Order")
        second = builder.node("user", ("email", "string"))
        resolved = resolve_names(load_diagram(builder.build()))

        assert resolved.resolve(first) == resolved.resolve(second) == "User"
        assert resolved.ordered_names == ["User", "Order"]
        assert [a.name for a in resolved.attributes["User"]] == ["email"]
        assert "reuses identifier User" in caplog.text

    def test_duplicate_attribute_names(self, builder, caplog):
        """Test the last attribute of a name wins in its first position"""
        builder.node("User", ("name", "string"), ("age", "int"), ("name", "int"))
        resolved = resolve_names(load_diagram(builder.build()))

        attributes = resolved.attributes["User"]
        assert [a.name for a in attributes] == ["name", "age"]
        assert attributes[0].type == AttributeType.INT
        assert "attribute 'name' more than once" in caplog.text
