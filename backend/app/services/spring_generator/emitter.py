"""
Java Emitter - renders Spring Boot source files from class descriptors.

Per class:
1. model/<C>.java           JPA entity (Lombok)
2. repository/<C>Repository.java
3. service/<C>Service.java
4. controller/<C>Controller.java
plus model/<Part>Id.java for every composite identity.

Output is a pure function of the descriptors: same input, same bytes.
"""

from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Iterable, List, Optional

from app.services.spring_generator.descriptors import (
    JPA,
    ClassDescriptor,
    CompositeIdentity,
    FieldSpec,
    ImportSet,
    RelationKind,
)
from app.services.spring_generator.naming import java_type

BASE_PACKAGE = "com.example.demo"
SOURCE_ROOT = PurePosixPath("src/main/java") / BASE_PACKAGE.replace(".", "/")

MODEL_DIR = SOURCE_ROOT / "model"
REPOSITORY_DIR = SOURCE_ROOT / "repository"
SERVICE_DIR = SOURCE_ROOT / "service"
CONTROLLER_DIR = SOURCE_ROOT / "controller"
PACKAGE_DIRS = (MODEL_DIR, REPOSITORY_DIR, SERVICE_DIR, CONTROLLER_DIR)

INDENT = "    "

_ANNOTATION_NAMES = {
    RelationKind.ONE_TO_MANY: "OneToMany",
    RelationKind.MANY_TO_ONE: "ManyToOne",
    RelationKind.ONE_TO_ONE: "OneToOne",
    RelationKind.MANY_TO_MANY: "ManyToMany",
}


@dataclass(frozen=True)
class Artifact:
    """One generated source file, path relative to the project root"""
    path: PurePosixPath
    content: str
    class_name: str


class JavaEmitter:
    """
    Formats descriptors into Java source text.

    Usage:
        emitter = JavaEmitter()
        artifacts = emitter.emit_all(descriptors)
    """

    def emit_all(self, descriptors: Iterable[ClassDescriptor]) -> List[Artifact]:
        artifacts: List[Artifact] = []
        for desc in descriptors:
            artifacts.extend(self.emit_class(desc))
        return artifacts

    def emit_class(self, desc: ClassDescriptor) -> List[Artifact]:
        name = desc.name
        artifacts = [
            Artifact(MODEL_DIR / f"{name}.java", self.render_entity(desc), name),
            Artifact(REPOSITORY_DIR / f"{name}Repository.java", self.render_repository(name), name),
            Artifact(SERVICE_DIR / f"{name}Service.java", self.render_service(name), name),
            Artifact(CONTROLLER_DIR / f"{name}Controller.java", self.render_controller(desc), name),
        ]
        if desc.composite_identity:
            identity = desc.composite_identity
            artifacts.append(Artifact(
                MODEL_DIR / f"{identity.id_class_name}.java",
                self.render_composite_id(identity),
                name,
            ))
        return artifacts

    # ----- Entity -----

    def render_entity(self, desc: ClassDescriptor) -> str:
        imports = ImportSet([
            f"{JPA}.Entity",
            "lombok.AllArgsConstructor",
            "lombok.Data",
            "lombok.NoArgsConstructor",
        ])
        annotations = ["@Data"]
        info = desc.inheritance

        if desc.is_child:
            imports.add(
                "lombok.EqualsAndHashCode",
                f"{JPA}.DiscriminatorValue",
                f"{JPA}.PrimaryKeyJoinColumn",
            )
            annotations.append("@EqualsAndHashCode(callSuper = true)")
        annotations.extend(["@NoArgsConstructor", "@AllArgsConstructor", "@Entity"])

        if info and info.is_root:
            imports.add(
                f"{JPA}.Inheritance",
                f"{JPA}.InheritanceType",
                f"{JPA}.DiscriminatorColumn",
                f"{JPA}.DiscriminatorType",
                f"{JPA}.DiscriminatorValue",
            )
            annotations.extend([
                "@Inheritance(strategy = InheritanceType.JOINED)",
                '@DiscriminatorColumn(name = "dtype", discriminatorType = DiscriminatorType.STRING, length = 1)',
                f'@DiscriminatorValue("{info.discriminator_value}")',
            ])
        elif desc.is_child:
            annotations.extend([
                f'@DiscriminatorValue("{info.discriminator_value}")',
                '@PrimaryKeyJoinColumn(name = "id")',
            ])

        blocks: List[str] = []
        primary_key = self._primary_key(desc, imports)
        if primary_key:
            blocks.append(primary_key)

        for attr in desc.attributes:
            if attr.name == "id":
                continue
            blocks.append(f"{INDENT}private {java_type(attr.type)} {attr.name};")

        for spec in desc.fields:
            imports.update(spec.required_imports())
            blocks.append(self._render_field(spec))

        extends = f" extends {info.parent_name}" if desc.is_child else ""
        lines = [f"package {BASE_PACKAGE}.model;", ""]
        lines.extend(f"import {symbol};" for symbol in imports)
        lines.append("")
        lines.extend(annotations)
        lines.append(f"public class {desc.name}{extends} {{")
        if blocks:
            lines.append("\n\n".join(blocks))
        lines.append("}")
        return "\n".join(lines) + "\n"

    def _primary_key(self, desc: ClassDescriptor, imports: ImportSet) -> Optional[str]:
        if desc.composite_identity:
            imports.add(f"{JPA}.EmbeddedId")
            return (
                f"{INDENT}@EmbeddedId\n"
                f"{INDENT}private {desc.composite_identity.id_class_name} id;"
            )
        if desc.is_child:
            return None

        imports.add(f"{JPA}.Id")
        if any(attr.name == "id" for attr in desc.attributes):
            return f"{INDENT}@Id\n{INDENT}private Long id;"

        imports.add(f"{JPA}.GeneratedValue", f"{JPA}.GenerationType")
        return (
            f"{INDENT}@Id\n"
            f"{INDENT}@GeneratedValue(strategy = GenerationType.IDENTITY)\n"
            f"{INDENT}private Long id;"
        )

    def _render_field(self, spec: FieldSpec) -> str:
        annotation = _ANNOTATION_NAMES[spec.kind]
        args = []
        if spec.mapped_by:
            args.append(f'mappedBy = "{spec.mapped_by}"')
        if spec.cascade_all:
            args.append("cascade = CascadeType.ALL")
        if spec.orphan_removal:
            args.append("orphanRemoval = true")
        if not spec.optional:
            args.append("optional = false")

        lines = [f"@{annotation}({', '.join(args)})" if args else f"@{annotation}"]
        if spec.maps_id:
            lines.append(f'@MapsId("{spec.maps_id}")')
        if spec.join_column:
            lines.append(f'@JoinColumn(name = "{spec.join_column}")')
        if spec.join_table:
            table = spec.join_table
            lines.append(
                f'@JoinTable(name = "{table.name}", '
                f'joinColumns = @JoinColumn(name = "{table.join_column}"), '
                f'inverseJoinColumns = @JoinColumn(name = "{table.inverse_join_column}"))'
            )
        if spec.json_reference:
            reference = "JsonManagedReference" if spec.owning else "JsonBackReference"
            lines.append(f'@{reference}("{spec.json_reference}")')
        lines.append(f"private {spec.java_type} {spec.name};")
        return "\n".join(f"{INDENT}{line}" for line in lines)

    # ----- Composite identity -----

    def render_composite_id(self, identity: CompositeIdentity) -> str:
        return f'''package {BASE_PACKAGE}.model;

import {JPA}.Embeddable;
import java.io.Serializable;
import lombok.AllArgsConstructor;
import lombok.Data;
import lombok.NoArgsConstructor;

@Data
@NoArgsConstructor
@AllArgsConstructor
@Embeddable
public class {identity.id_class_name} implements Serializable {{
    private {identity.whole_id_type} {identity.whole_id_field};
    private {identity.own_id_type} id;
}}
'''

    # ----- Repository / Service / Controller -----

    def render_repository(self, name: str) -> str:
        return f'''package {BASE_PACKAGE}.repository;

import {BASE_PACKAGE}.model.{name};
import org.springframework.data.jpa.repository.JpaRepository;
import org.springframework.stereotype.Repository;

@Repository
public interface {name}Repository extends JpaRepository<{name}, Long> {{
}}
'''

    def render_service(self, name: str) -> str:
        return f'''package {BASE_PACKAGE}.service;

import {BASE_PACKAGE}.model.{name};
import {BASE_PACKAGE}.repository.{name}Repository;
import java.util.List;
import java.util.Optional;
import org.springframework.stereotype.Service;

@Service
public class {name}Service {{
    private final {name}Repository repository;

    public {name}Service({name}Repository repository) {{
        this.repository = repository;
    }}

    public List<{name}> findAll() {{
        return repository.findAll();
    }}

    public Optional<{name}> findById(Long id) {{
        return repository.findById(id);
    }}

    public {name} create({name} entity) {{
        return repository.save(entity);
    }}

    public {name} update(Long id, {name} entity) {{
        entity.setId(id);
        return repository.save(entity);
    }}

    public void delete(Long id) {{
        repository.deleteById(id);
    }}
}}
'''

    def render_controller(self, desc: ClassDescriptor) -> str:
        name = desc.name
        lower = desc.lower_name
        typed_endpoints = self._typed_endpoints(name, lower) if desc.is_child else ""
        stream_import = "import java.util.stream.Collectors;\n" if desc.is_child else ""

        return f'''package {BASE_PACKAGE}.controller;

import {BASE_PACKAGE}.model.{name};
import {BASE_PACKAGE}.service.{name}Service;
import java.util.List;
{stream_import}import org.springframework.http.MediaType;
import org.springframework.http.ResponseEntity;
import org.springframework.web.bind.annotation.*;

@RestController
@RequestMapping("/api/{lower}")
public class {name}Controller {{
    private final {name}Service service;

    public {name}Controller({name}Service service) {{
        this.service = service;
    }}

    @GetMapping(produces = MediaType.APPLICATION_JSON_VALUE)
    public List<{name}> all() {{
        return service.findAll();
    }}

    @GetMapping(path = "/{{id}}", produces = MediaType.APPLICATION_JSON_VALUE)
    public ResponseEntity<{name}> get(@PathVariable Long id) {{
        return service.findById(id)
                .map(ResponseEntity::ok)
                .orElse(ResponseEntity.notFound().build());
    }}

    @PostMapping(consumes = MediaType.APPLICATION_JSON_VALUE, produces = MediaType.APPLICATION_JSON_VALUE)
    public {name} create(@RequestBody {name} entity) {{
        return service.create(entity);
    }}

    @PutMapping(path = "/{{id}}", consumes = MediaType.APPLICATION_JSON_VALUE, produces = MediaType.APPLICATION_JSON_VALUE)
    public {name} update(@PathVariable Long id, @RequestBody {name} entity) {{
        return service.update(id, entity);
    }}

    @DeleteMapping(path = "/{{id}}")
    public ResponseEntity<Void> delete(@PathVariable Long id) {{
        service.delete(id);
        return ResponseEntity.noContent().build();
    }}
{typed_endpoints}}}
'''

    def _typed_endpoints(self, name: str, lower: str) -> str:
        """Extra endpoints on a subclass controller, filtered by runtime type"""
        return f'''
    @GetMapping(path = "/{lower}s", produces = MediaType.APPLICATION_JSON_VALUE)
    public List<{name}> all{name}s() {{
        return service.findAll().stream()
                .filter(v -> v instanceof {name})
                .map(v -> ({name}) v)
                .collect(Collectors.toList());
    }}

    @GetMapping(path = "/{lower}s/{{id}}", produces = MediaType.APPLICATION_JSON_VALUE)
    public ResponseEntity<{name}> get{name}(@PathVariable Long id) {{
        return service.findById(id)
                .filter(v -> v instanceof {name})
                .map(v -> ({name}) v)
                .map(ResponseEntity::ok)
                .orElse(ResponseEntity.notFound().build());
    }}
'''
