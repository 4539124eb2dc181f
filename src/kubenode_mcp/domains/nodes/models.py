"""Pydantic models for worker nodes.

Three families live here:

* snapshots of the two sources of truth, ``Machine`` (what was asked for)
  and ``RuntimeNode`` (what joined the cluster);
* ``CorrelatedNode``, the pairing of the two;
* the outward read models ``NodeView`` and ``LegacyNode``.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from kubenode_mcp.models.common import (
    Condition,
    OwnerReference,
    controller_of,
    field_of,
)
from kubenode_mcp.utils.errors import TemplatingError, ValidationError


class _ProviderSettings(BaseModel):
    """Base for provider settings; accepts snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# Cloud providers


class CloudProviderKind(str, Enum):
    """Cloud providers a machine can be created on."""

    DIGITALOCEAN = "digitalocean"
    AWS = "aws"
    OPENSTACK = "openstack"
    HETZNER = "hetzner"
    VSPHERE = "vsphere"
    AZURE = "azure"


class DigitaloceanNodeSpec(_ProviderSettings):
    size: str = Field(..., description="Droplet size slug")
    backups: bool = False
    ipv6: bool = False
    monitoring: bool = False
    tags: list[str] = Field(default_factory=list)


class AWSNodeSpec(_ProviderSettings):
    instance_type: str = Field(..., description="EC2 instance type")
    volume_size: int = Field(25, description="Root volume size in GB")
    volume_type: str = "gp2"
    ami: str = ""
    tags: dict[str, str] = Field(default_factory=dict)


class OpenstackNodeSpec(_ProviderSettings):
    flavor: str = Field(..., description="Instance flavor")
    image: str = Field(..., description="Image name")
    tags: dict[str, str] = Field(default_factory=dict)


class HetznerNodeSpec(_ProviderSettings):
    type: str = Field(..., description="Server type")


class VSphereNodeSpec(_ProviderSettings):
    cpus: int = Field(..., description="Number of vCPUs")
    memory: int = Field(..., description="Memory in MB")
    template: str = ""


class AzureNodeSpec(_ProviderSettings):
    size: str = Field(..., description="VM size")
    assign_public_ip: bool = False
    tags: dict[str, str] = Field(default_factory=dict)


_CLOUD_SETTINGS: dict[CloudProviderKind, type[_ProviderSettings]] = {
    CloudProviderKind.DIGITALOCEAN: DigitaloceanNodeSpec,
    CloudProviderKind.AWS: AWSNodeSpec,
    CloudProviderKind.OPENSTACK: OpenstackNodeSpec,
    CloudProviderKind.HETZNER: HetznerNodeSpec,
    CloudProviderKind.VSPHERE: VSphereNodeSpec,
    CloudProviderKind.AZURE: AzureNodeSpec,
}


class NodeCloudSpec(BaseModel):
    """Cloud settings of a node: at most one provider section is populated."""

    model_config = ConfigDict(frozen=True)

    digitalocean: DigitaloceanNodeSpec | None = None
    aws: AWSNodeSpec | None = None
    openstack: OpenstackNodeSpec | None = None
    hetzner: HetznerNodeSpec | None = None
    vsphere: VSphereNodeSpec | None = None
    azure: AzureNodeSpec | None = None

    def populated_providers(self) -> list[CloudProviderKind]:
        """Provider kinds whose section is set, in declaration order."""
        return [kind for kind in CloudProviderKind if getattr(self, kind.value) is not None]

    @property
    def provider(self) -> CloudProviderKind | None:
        """The single populated provider, or None when zero or several are set."""
        populated = self.populated_providers()
        return populated[0] if len(populated) == 1 else None

    @property
    def settings(self) -> _ProviderSettings | None:
        """Settings of the single populated provider."""
        kind = self.provider
        return getattr(self, kind.value) if kind else None

    def require_single_provider(self) -> CloudProviderKind:
        """Return the provider kind, raising unless exactly one section is set."""
        populated = self.populated_providers()
        if not populated:
            raise ValidationError("cannot create node without cloud provider")
        if len(populated) > 1:
            raise ValidationError(
                "node must specify exactly one cloud provider, got: "
                + ", ".join(kind.value for kind in populated)
            )
        return populated[0]

    @classmethod
    def from_provider(cls, kind: str, settings: dict[str, Any] | None) -> "NodeCloudSpec":
        """Build from a provider kind name and its raw settings."""
        provider = CloudProviderKind(kind)
        return cls(**{provider.value: _CLOUD_SETTINGS[provider].model_validate(settings or {})})


# Operating systems


class OperatingSystemKind(str, Enum):
    """Operating systems a machine can boot."""

    UBUNTU = "ubuntu"
    CENTOS = "centos"
    CONTAINER_LINUX = "containerLinux"


class UbuntuSpec(_ProviderSettings):
    dist_upgrade_on_boot: bool = False


class CentOSSpec(_ProviderSettings):
    dist_upgrade_on_boot: bool = False


class ContainerLinuxSpec(_ProviderSettings):
    disable_auto_update: bool = False


_OS_SETTINGS: dict[OperatingSystemKind, tuple[str, type[_ProviderSettings]]] = {
    OperatingSystemKind.UBUNTU: ("ubuntu", UbuntuSpec),
    OperatingSystemKind.CENTOS: ("centos", CentOSSpec),
    OperatingSystemKind.CONTAINER_LINUX: ("container_linux", ContainerLinuxSpec),
}


class OperatingSystemSpec(BaseModel):
    """Operating system settings of a node."""

    model_config = ConfigDict(frozen=True)

    ubuntu: UbuntuSpec | None = None
    centos: CentOSSpec | None = None
    container_linux: ContainerLinuxSpec | None = None

    @property
    def kind(self) -> OperatingSystemKind | None:
        """The single populated operating system, if any."""
        populated = [
            kind for kind, (attr, _) in _OS_SETTINGS.items() if getattr(self, attr) is not None
        ]
        return populated[0] if len(populated) == 1 else None

    @property
    def settings(self) -> _ProviderSettings | None:
        kind = self.kind
        return getattr(self, _OS_SETTINGS[kind][0]) if kind else None

    @classmethod
    def from_kind(cls, kind: str, settings: dict[str, Any] | None) -> "OperatingSystemSpec":
        """Build from an operating system name and its raw settings."""
        os_kind = OperatingSystemKind(kind)
        attr, model = _OS_SETTINGS[os_kind]
        return cls(**{attr: model.model_validate(settings or {})})


# Read model


class NodeVersionInfo(BaseModel):
    kubelet: str = ""


class NodeSpec(BaseModel):
    """Desired node settings."""

    versions: NodeVersionInfo = Field(default_factory=NodeVersionInfo)
    operating_system: OperatingSystemSpec = Field(default_factory=OperatingSystemSpec)
    cloud: NodeCloudSpec = Field(default_factory=NodeCloudSpec)


class NodeAddress(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    address: str


class NodeResources(BaseModel):
    """CPU and memory quantities as reported by the kubelet."""

    model_config = ConfigDict(frozen=True)

    cpu: str = ""
    memory: str = ""

    @classmethod
    def from_quantities(cls, quantities: Any) -> "NodeResources":
        quantities = quantities or {}
        return cls(
            cpu=str(quantities.get("cpu", "") or ""),
            memory=str(quantities.get("memory", "") or ""),
        )


class NodeSystemInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    operating_system: str = ""
    kubelet_version: str = ""
    architecture: str = ""


class NodeStatus(BaseModel):
    """Observed node state derived from the Machine and the Node."""

    machine_name: str = ""
    addresses: list[NodeAddress] = Field(default_factory=list)
    error_reason: str = ""
    error_message: str = ""
    capacity: NodeResources | None = None
    allocatable: NodeResources | None = None
    node_info: NodeSystemInfo | None = None


class NodeObjectMeta(BaseModel):
    name: str = Field("", description="Identity of the node (Machine name when one exists)")
    display_name: str = Field("", description="Name shown to users")
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None


class NodeView(BaseModel):
    """Structured read model of a worker node."""

    metadata: NodeObjectMeta = Field(default_factory=NodeObjectMeta)
    spec: NodeSpec = Field(default_factory=NodeSpec)
    status: NodeStatus = Field(default_factory=NodeStatus)


class LegacyNode(BaseModel):
    """Flat read model kept for older clients: no labels or annotations."""

    id: str = Field("", description="Identity of the node")
    name: str = Field("", description="Display name")
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None
    spec: NodeSpec = Field(default_factory=NodeSpec)
    status: NodeStatus = Field(default_factory=NodeStatus)


# Source snapshots


def _as_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class Machine(BaseModel):
    """Snapshot of a cluster-api Machine: the provisioning record of a node."""

    model_config = ConfigDict(frozen=True)

    name: str
    namespace: str = ""
    uid: str = ""
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None
    spec_name: str = Field("", description="Node name the machine declares")
    kubelet_version: str = ""
    operating_system: OperatingSystemSpec = Field(default_factory=OperatingSystemSpec)
    cloud: NodeCloudSpec = Field(default_factory=NodeCloudSpec)
    node_ref_uid: str | None = None
    error_reason: str | None = None
    error_message: str | None = None

    @classmethod
    def from_machine_cr(cls, machine: Any) -> "Machine":
        """Create from a Machine custom resource.

        Raises:
            TemplatingError: If the provider spec names an unknown cloud provider
                or operating system, or its settings do not parse.
        """
        data = _as_dict(machine)
        metadata = data.get("metadata") or {}
        spec = data.get("spec") or {}
        status = data.get("status") or {}

        provider_spec = spec.get("providerSpec") or spec.get("providerConfig") or {}
        provider_value = provider_spec.get("value") or {}
        name = metadata.get("name", "")

        try:
            cloud = NodeCloudSpec()
            if provider_value.get("cloudProvider"):
                cloud = NodeCloudSpec.from_provider(
                    provider_value["cloudProvider"], provider_value.get("cloudProviderSpec")
                )
            operating_system = OperatingSystemSpec()
            if provider_value.get("operatingSystem"):
                operating_system = OperatingSystemSpec.from_kind(
                    provider_value["operatingSystem"], provider_value.get("operatingSystemSpec")
                )
        except (ValueError, PydanticValidationError) as e:
            raise TemplatingError(
                f"failed to read provider spec of machine '{name}': {e}",
                {"machine": name},
            ) from e

        node_ref = status.get("nodeRef") or {}
        return cls(
            name=name,
            namespace=metadata.get("namespace", ""),
            uid=metadata.get("uid", ""),
            creation_timestamp=metadata.get("creationTimestamp"),
            deletion_timestamp=metadata.get("deletionTimestamp"),
            spec_name=(spec.get("metadata") or {}).get("name", ""),
            kubelet_version=(spec.get("versions") or {}).get("kubelet", ""),
            operating_system=operating_system,
            cloud=cloud,
            node_ref_uid=node_ref.get("uid") or None,
            error_reason=status.get("errorReason"),
            error_message=status.get("errorMessage"),
        )


class RuntimeNode(BaseModel):
    """Snapshot of a Kubernetes Node: a worker that joined the cluster."""

    model_config = ConfigDict(frozen=True)

    name: str
    uid: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None
    owner_references: list[OwnerReference] = Field(default_factory=list)
    addresses: list[NodeAddress] = Field(default_factory=list)
    conditions: list[Condition] = Field(default_factory=list)
    capacity: NodeResources = Field(default_factory=NodeResources)
    allocatable: NodeResources = Field(default_factory=NodeResources)
    node_info: NodeSystemInfo = Field(default_factory=NodeSystemInfo)

    @property
    def controller_uid(self) -> str | None:
        """UID of the controlling owner, if the node has one."""
        ref = controller_of(self.owner_references)
        return ref.uid if ref else None

    @classmethod
    def from_k8s_node(cls, node: Any) -> "RuntimeNode":
        """Create from a V1Node or a Node manifest dict."""
        metadata = field_of(node, "metadata")
        status = field_of(node, "status")
        info = field_of(status, "node_info", "nodeInfo")

        return cls(
            name=field_of(metadata, "name", default=""),
            uid=field_of(metadata, "uid", default=""),
            labels=dict(field_of(metadata, "labels", default={})),
            annotations=dict(field_of(metadata, "annotations", default={})),
            creation_timestamp=field_of(metadata, "creation_timestamp", "creationTimestamp"),
            deletion_timestamp=field_of(metadata, "deletion_timestamp", "deletionTimestamp"),
            owner_references=[
                OwnerReference.from_k8s_owner_reference(ref)
                for ref in field_of(metadata, "owner_references", "ownerReferences", default=[])
            ],
            addresses=[
                NodeAddress(
                    type=field_of(address, "type", default=""),
                    address=field_of(address, "address", default=""),
                )
                for address in field_of(status, "addresses", default=[])
            ],
            conditions=[
                Condition.from_k8s_condition(c) for c in field_of(status, "conditions", default=[])
            ],
            capacity=NodeResources.from_quantities(field_of(status, "capacity")),
            allocatable=NodeResources.from_quantities(field_of(status, "allocatable")),
            node_info=NodeSystemInfo(
                operating_system=field_of(info, "operating_system", "operatingSystem", default=""),
                kubelet_version=field_of(info, "kubelet_version", "kubeletVersion", default=""),
                architecture=field_of(info, "architecture", default=""),
            ),
        )


class CorrelatedNode(BaseModel):
    """A Machine, a Node, or both, describing one worker."""

    model_config = ConfigDict(frozen=True)

    machine: Machine | None = None
    node: RuntimeNode | None = None

    @model_validator(mode="after")
    def _require_one_side(self) -> "CorrelatedNode":
        if self.machine is None and self.node is None:
            raise ValueError("correlated node needs a machine or a node")
        return self

    @property
    def is_matched(self) -> bool:
        return self.machine is not None and self.node is not None


class ClusterContext(BaseModel):
    """The user cluster a request operates on."""

    name: str = Field(..., description="Cluster name")
    version: str = Field("", description="Control plane version declared by the cluster")
    machine_namespace: str = Field("kube-system", description="Namespace holding Machines")
    ssh_public_keys: list[str] = Field(default_factory=list)
