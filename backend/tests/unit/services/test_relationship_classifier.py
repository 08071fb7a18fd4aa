"""
Unit Tests for the Relationship Classifier

Every case yields an owning/inverse pair whose names depend only on the
two class identifiers and the edge direction.
"""
import pytest

from app.services.spring_generator import SpringGeneratorService
from app.services.spring_generator.descriptors import RelationKind, RelationshipSequence
from app.services.spring_generator.relationships import is_many


@pytest.fixture
def generator(tmp_path):
    return SpringGeneratorService(template_dir=tmp_path / "no-template")


def only_field(descriptor, related):
    fields = descriptor.find_fields(related=related)
    assert len(fields) == 1
    return fields[0]


class TestCardinality:
    """Test the many marker"""

    def test_many_markers(self):
        """Test any cardinality containing * is many"""
        assert is_many("*")
        assert is_many("0..*")
        assert is_many("1..*")

    def test_single_markers(self):
        """Test everything else is one"""
        assert not is_many("1")
        assert not is_many("0..1")
        assert not is_many("n")
        assert not is_many("")
        assert not is_many(None)


class TestOneToMany:
    """Test one/many classification"""

    def test_target_many(self, builder, generator):
        """Test source 1, target * puts the collection on the source"""
        user = builder.node("User")
        order = builder.node("Order")
        builder.edge(user, order, source_card="1", target_card="*")
        descriptors = generator.build_plan(builder.build()).descriptors

        orders = only_field(descriptors["User"], "Order")
        assert orders.name == "orders"
        assert orders.kind == RelationKind.ONE_TO_MANY
        assert orders.collection is True
        assert orders.owning is True
        assert orders.mapped_by == "user"
        assert orders.json_reference == "user"

        back = only_field(descriptors["Order"], "User")
        assert back.name == "user"
        assert back.kind == RelationKind.MANY_TO_ONE
        assert back.owning is False
        assert back.join_column == "user_id"
        assert back.json_reference == "user"

    def test_source_many_is_mirrored(self, builder, generator):
        """Test source *, target 1 produces the same pair from the other side"""
        order = builder.node("Order")
        user = builder.node("User")
        builder.edge(order, user, source_card="0..*", target_card="1")
        descriptors = generator.build_plan(builder.build()).descriptors

        assert only_field(descriptors["User"], "Order").name == "orders"
        assert only_field(descriptors["User"], "Order").kind == RelationKind.ONE_TO_MANY
        assert only_field(descriptors["Order"], "User").join_column == "user_id"


class TestManyToMany:
    """Test many/many classification"""

    def test_source_owns_join_table(self, builder, generator):
        """Test the join table is named source_target"""
        student = builder.node("Student")
        course = builder.node("Course")
        builder.edge(student, course, source_card="*", target_card="1..*")
        descriptors = generator.build_plan(builder.build()).descriptors

        courses = only_field(descriptors["Student"], "Course")
        assert courses.kind == RelationKind.MANY_TO_MANY
        assert courses.name == "courses"
        assert courses.owning is True
        assert courses.join_table.name == "student_course"
        assert courses.join_table.join_column == "student_id"
        assert courses.join_table.inverse_join_column == "course_id"

        students = only_field(descriptors["Course"], "Student")
        assert students.name == "students"
        assert students.mapped_by == "courses"
        assert students.owning is False
        assert students.json_reference == courses.json_reference == "student_course"


class TestOneToOne:
    """Test one/one classification"""

    def test_source_holds_foreign_key(self, builder, generator):
        """Test the source side owns the FK"""
        person = builder.node("Person")
        passport = builder.node("Passport")
        builder.edge(person, passport, source_card="1", target_card="0..1")
        descriptors = generator.build_plan(builder.build()).descriptors

        owning = only_field(descriptors["Person"], "Passport")
        assert owning.kind == RelationKind.ONE_TO_ONE
        assert owning.name == "passport"
        assert owning.join_column == "passport_id"
        assert owning.owning is True

        inverse = only_field(descriptors["Passport"], "Person")
        assert inverse.name == "person"
        assert inverse.mapped_by == "passport"
        assert inverse.join_column is None

    def test_missing_cardinalities(self, builder, generator):
        """Test an edge without cardinalities is one-to-one"""
        a = builder.node("Alpha")
        b = builder.node("Beta")
        builder.edge(a, b)
        descriptors = generator.build_plan(builder.build()).descriptors

        assert only_field(descriptors["Alpha"], "Beta").kind == RelationKind.ONE_TO_ONE

    def test_other_kinds_use_cardinality(self, builder, generator):
        """Test aggregation and dependency edges are classified the same way"""
        team = builder.node("Team")
        player = builder.node("Player")
        coach = builder.node("Coach")
        builder.edge(team, player, kind="aggregation", source_card="1", target_card="*")
        builder.edge(team, coach, kind="dependency")
        descriptors = generator.build_plan(builder.build()).descriptors

        assert only_field(descriptors["Team"], "Player").kind == RelationKind.ONE_TO_MANY
        assert only_field(descriptors["Team"], "Coach").kind == RelationKind.ONE_TO_ONE


class TestAssociationClass:
    """Test join-entity classification"""

    def test_user_product_via_purchase(self, builder, generator):
        """Test both endpoints get a collection and the join entity two references"""
        user = builder.node("User")
        product = builder.node("Product")
        purchase = builder.node("Purchase", ("quantity", "int"), association_class=True)
        builder.edge(user, product, source_card="*", target_card="*", association_class=purchase)
        descriptors = generator.build_plan(builder.build()).descriptors

        user_side = only_field(descriptors["User"], "Purchase")
        assert user_side.kind == RelationKind.ONE_TO_MANY
        assert user_side.name == "purchases"
        assert user_side.mapped_by == "user"
        assert user_side.json_reference == "user_purchase"

        product_side = only_field(descriptors["Product"], "Purchase")
        assert product_side.mapped_by == "product"
        assert product_side.json_reference == "product_purchase"

        to_user = only_field(descriptors["Purchase"], "User")
        to_product = only_field(descriptors["Purchase"], "Product")
        assert to_user.kind == to_product.kind == RelationKind.MANY_TO_ONE
        assert to_user.join_column == "user_id"
        assert to_product.join_column == "product_id"

        # No direct link between the endpoints
        assert descriptors["User"].find_fields(related="Product") == []
        assert descriptors["Purchase"].is_association_class is True

    def test_unresolved_association_class(self, builder, generator):
        """Test an unknown association class falls back to cardinality"""
        user = builder.node("User")
        product = builder.node("Product")
        builder.edge(user, product, source_card="*", target_card="*", association_class="ghost")
        descriptors = generator.build_plan(builder.build()).descriptors

        assert only_field(descriptors["User"], "Product").kind == RelationKind.MANY_TO_MANY


class TestDuplicateRelationships:
    """Test the per-pair sequence suffixes"""

    def test_sequence_is_unordered(self):
        """Test A-B and B-A share a counter"""
        sequence = RelationshipSequence()

        assert sequence.next_suffix("A", "B") == ""
        assert sequence.next_suffix("B", "A") == "2"
        assert sequence.next_suffix("A", "C") == ""
        assert sequence.count("B", "A") == 2

    def test_second_one_to_many(self, builder, generator):
        """Test the second relationship suffixes every derived name"""
        user = builder.node("User")
        order = builder.node("Order")
        builder.edge(user, order, source_card="1", target_card="*")
        builder.edge(user, order, source_card="1", target_card="*")
        descriptors = generator.build_plan(builder.build()).descriptors

        assert [f.name for f in descriptors["User"].fields] == ["orders", "orders2"]
        second = descriptors["User"].fields[1]
        assert second.mapped_by == "user2"
        assert second.json_reference == "user2"

        back = descriptors["Order"].fields[1]
        assert back.name == "user2"
        assert back.join_column == "user2_id"

    def test_mixed_shapes_share_the_sequence(self, builder, generator):
        """Test a one-to-one after a one-to-many between the same pair is suffixed"""
        user = builder.node("User")
        order = builder.node("Order")
        builder.edge(user, order, source_card="1", target_card="*")
        builder.edge(order, user)
        descriptors = generator.build_plan(builder.build()).descriptors

        owning = descriptors["Order"].find_fields(kind=RelationKind.ONE_TO_ONE)[0]
        assert owning.name == "user2"
        assert owning.join_column == "user2_id"
        inverse = descriptors["User"].find_fields(kind=RelationKind.ONE_TO_ONE)[0]
        assert inverse.name == "order2"
        assert inverse.mapped_by == "user2"

    def test_duplicate_many_to_many(self, builder, generator):
        """Test the second join table gets its own name"""
        a = builder.node("Author")
        b = builder.node("Book")
        builder.edge(a, b, source_card="*", target_card="*")
        builder.edge(a, b, source_card="*", target_card="*")
        descriptors = generator.build_plan(builder.build()).descriptors

        tables = [f.join_table.name for f in descriptors["Author"].fields]
        assert tables == ["author_book", "author_book2"]
        assert [f.mapped_by for f in descriptors["Book"].fields] == ["books", "books2"]


class TestUnresolvedEdges:
    """Test edges that point at missing nodes"""

    def test_dropped_without_side_effects(self, builder, generator):
        """Test the edge is counted as dropped and adds nothing"""
        user = builder.node("User")
        builder.edge(user, "missing", source_card="1", target_card="*")
        plan = generator.build_plan(builder.build())

        assert plan.dropped_edges == 1
        assert plan.descriptors["User"].fields == []


class TestSelfReferences:
    """Test edges whose ends are the same class"""

    def test_one_to_one(self, builder, generator):
        """Test the mirror side gets its own field name"""
        employee = builder.node("Employee")
        builder.edge(employee, employee, source_card="1", target_card="0..1")
        fields = generator.build_plan(builder.build()).descriptors["Employee"].fields

        assert [f.name for f in fields] == ["employee", "inverseEmployee"]
        owning, inverse = fields
        assert owning.join_column == "employee_id"
        assert inverse.mapped_by == "employee"
        assert inverse.owning is False

    def test_many_to_many(self, builder, generator):
        """Test distinct field names and join columns"""
        person = builder.node("Person")
        builder.edge(person, person, source_card="*", target_card="*")
        fields = generator.build_plan(builder.build()).descriptors["Person"].fields

        assert [f.name for f in fields] == ["persons", "inversePersons"]
        owning, inverse = fields
        assert owning.join_table.name == "person_person"
        assert owning.join_table.join_column == "person_id"
        assert owning.join_table.inverse_join_column == "inverse_person_id"
        assert inverse.mapped_by == "persons"

    def test_one_to_many_needs_no_prefix(self, builder, generator):
        """Test collection and back reference already differ"""
        node = builder.node("Category")
        builder.edge(node, node, source_card="1", target_card="*")
        fields = generator.build_plan(builder.build()).descriptors["Category"].fields

        assert [f.name for f in fields] == ["categorys", "category"]
