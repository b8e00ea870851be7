"""
AWS Control Plane Adapter

Architectural Intent:
- Implements every provider port (network, support, load balancer, fleet,
  endpoint, DNS) against a simulated AWS control plane
- Simulates boto3 request/response shapes without importing the real SDK,
  enabling integration testing and local planning with zero cloud credentials
- When the real boto3 library is available, replace _call with actual
  client calls; the public method signatures remain stable

Design Decisions:
- Every mutating API call goes through _call, is logged at DEBUG level with
  its request payload, and is appended to api_calls so tests can assert on
  side effects
- Resources are keyed by their derived Name, so provisioning is idempotent:
  unchanged inputs return the existing resource and issue no Create* call
- Resource ids are derived from the resource name, so re-planning the same
  identity reproduces the same ids
- failure_hook and latency let tests inject control-plane errors and
  interleavings

Simulated AWS region defaults: us-east-1
Simulated AMI: ami-0abcdef1234567890 (placeholder)
"""

from __future__ import annotations
import asyncio
import hashlib
import ipaddress
import logging
import string
import uuid
from itertools import islice
from typing import Any, Callable, Optional, Sequence

from ccfleet.domain.value_objects.deployment_identity import DeploymentIdentity
from ccfleet.domain.value_objects.handles import (
    BastionHandles,
    DnsHandles,
    EndpointHandles,
    FleetHandles,
    FleetSpec,
    IamHandles,
    LoadBalancerHandles,
    NetworkHandles,
    SecurityGroupHandles,
    WorkloadHandles,
)
from ccfleet.domain.value_objects.settings import (
    DnsSettings,
    EndpointSettings,
    LoadBalancerSettings,
    NetworkSettings,
)
from ccfleet.domain.value_objects.target_registration import (
    GENEVE_PORT,
    TargetRegistration,
)

logger = logging.getLogger(__name__)

FailureHook = Callable[[str, dict], None]

# Subnet indexes carved out of the VPC block as /24s.
_WORKLOAD_SUBNET_BASE = 1
_PUBLIC_SUBNET_BASE = 101
_CC_SUBNET_BASE = 200

_STICKINESS_TYPES = {
    "5-tuple": "source_ip_dest_ip_proto_src_port_dest_port",
    "3-tuple": "source_ip_dest_ip_proto",
    "2-tuple": "source_ip_dest_ip",
}


# ---------------------------------------------------------------------------
# Internal helpers that mimic the shape of real boto3 payloads.
# ---------------------------------------------------------------------------

def _make_id(prefix: str, name: str, length: int = 17) -> str:
    """Return a plausible AWS resource id derived from the resource name."""
    return f"{prefix}-" + hashlib.sha256(name.encode("utf-8")).hexdigest()[:length]


def _tag_list(tags: dict[str, str]) -> list[dict[str, str]]:
    return [{"Key": k, "Value": v} for k, v in sorted(tags.items())]


def _subnet_cidr(vpc_cidr: str, index: int) -> str:
    network = ipaddress.ip_network(vpc_cidr)
    return str(next(islice(network.subnets(new_prefix=24), index, None)))


def _response(payload: dict) -> dict:
    return {
        **payload,
        "ResponseMetadata": {
            "RequestId": str(uuid.uuid4()),
            "HTTPStatusCode": 200,
            "HTTPHeaders": {},
        },
    }


class AWSAdapter:
    """
    Simulated AWS control plane for connector deployments.

    Configuration parameters
    ------------------------
    region : str
        AWS region name (e.g. "us-east-1").
    account_id : str
        Account id embedded in generated ARNs.
    default_ami : str
        AMI used for connector, bastion and workload instances.
    latency : float
        Seconds every public call sleeps before acting.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        account_id: str = "123456789012",
        default_ami: str = "ami-0abcdef1234567890",
        latency: float = 0.0,
    ) -> None:
        self.region = region
        self.account_id = account_id
        self.default_ami = default_ami
        self.latency = latency
        self.failure_hook: Optional[FailureHook] = None

        # Resource records keyed by Name tag value.
        self._resources: dict[str, dict[str, Any]] = {}
        # Target group ARN -> registered targets in registration order.
        self._targets: dict[str, list[dict[str, Any]]] = {}
        self.api_calls: list[tuple[str, dict]] = []

        logger.debug("AWSAdapter initialised (region=%s, ami=%s)", region, default_ami)

    # ------------------------------------------------------------------
    # Simulated control plane plumbing
    # ------------------------------------------------------------------

    async def _pause(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    def _call(self, operation: str, **params: Any) -> dict:
        if self.failure_hook:
            self.failure_hook(operation, params)
        logger.debug("AWS %s %s", operation, params)
        self.api_calls.append((operation, params))
        return _response({})

    def _arn(self, service: str, resource: str) -> str:
        return f"arn:aws:{service}:{self.region}:{self.account_id}:{resource}"

    def _ensure(
        self,
        identity: DeploymentIdentity,
        kind: str,
        name: str,
        operation: str,
        id_prefix: str,
        **params: Any,
    ) -> dict[str, Any]:
        existing = self._resources.get(name)
        if existing is not None:
            logger.debug("%s %s already exists (%s)", kind, name, existing["Id"])
            return existing
        self._call(operation, **params)
        record = {
            "Kind": kind,
            "Name": name,
            "Id": _make_id(id_prefix, name),
            "DeploymentSuffix": identity.suffix,
            "Tags": _tag_list(identity.tags_for(kind) | {"Name": name}),
            **params,
        }
        self._resources[name] = record
        return record

    def _destroy(self, identity: DeploymentIdentity, kinds: Sequence[str]) -> int:
        doomed = [
            r for r in self._resources.values()
            if r["DeploymentSuffix"] == identity.suffix and r["Kind"] in kinds
        ]
        for record in reversed(doomed):
            self._call(f"Delete{record['Kind']}", Id=record["Id"])
            del self._resources[record["Name"]]
        return len(doomed)

    def resources(self, kind: Optional[str] = None) -> list[dict[str, Any]]:
        return [r for r in self._resources.values() if kind is None or r["Kind"] == kind]

    def _by_id(self, resource_id: str) -> Optional[dict[str, Any]]:
        return next((r for r in self._resources.values() if r["Id"] == resource_id), None)

    def calls(self, operation: str) -> list[dict]:
        return [params for op, params in self.api_calls if op == operation]

    # ------------------------------------------------------------------
    # NetworkPort
    # ------------------------------------------------------------------

    async def provision_network(
        self, identity: DeploymentIdentity, settings: NetworkSettings
    ) -> NetworkHandles:
        await self._pause()
        vpc = self._ensure(
            identity, "Vpc", identity.resource_name("vpc"), "CreateVpc", "vpc",
            CidrBlock=settings.vpc_cidr,
        )
        self._ensure(
            identity, "InternetGateway", identity.resource_name("igw"),
            "CreateInternetGateway", "igw", VpcId=vpc["Id"],
        )

        zones = tuple(
            f"{settings.region}{string.ascii_lowercase[i]}" for i in range(settings.az_count)
        )
        public, workload, cc = [], [], []
        for i, zone in enumerate(zones, start=1):
            for base, role, bucket in (
                (_PUBLIC_SUBNET_BASE, "public-subnet", public),
                (_WORKLOAD_SUBNET_BASE, "workload-subnet", workload),
                (_CC_SUBNET_BASE, "cc-subnet", cc),
            ):
                subnet = self._ensure(
                    identity, "Subnet", identity.resource_name(f"{role}-{i}"),
                    "CreateSubnet", "subnet",
                    VpcId=vpc["Id"],
                    CidrBlock=_subnet_cidr(settings.vpc_cidr, base + i - 1),
                    AvailabilityZone=zone,
                )
                bucket.append(subnet["Id"])
            self._ensure(
                identity, "NatGateway", identity.resource_name(f"natgw-{i}"),
                "CreateNatGateway", "nat", SubnetId=public[-1],
            )
            self._ensure(
                identity, "RouteTable", identity.resource_name(f"cc-rt-{i}"),
                "CreateRouteTable", "rtb", VpcId=vpc["Id"], SubnetId=cc[-1],
            )

        logger.info("Network %s ready with %d connector subnet(s)", vpc["Id"], len(cc))
        return NetworkHandles(
            vpc_id=vpc["Id"],
            cc_subnet_ids=tuple(cc),
            availability_zones=zones,
            public_subnet_ids=tuple(public),
            workload_subnet_ids=tuple(workload),
        )

    async def destroy_network(self, identity: DeploymentIdentity) -> int:
        await self._pause()
        return self._destroy(
            identity, ("RouteTable", "NatGateway", "Subnet", "InternetGateway", "Vpc")
        )

    # ------------------------------------------------------------------
    # SupportPort
    # ------------------------------------------------------------------

    async def provision_bastion(
        self, identity: DeploymentIdentity, network: NetworkHandles
    ) -> BastionHandles:
        await self._pause()
        record = self._ensure(
            identity, "Instance", identity.resource_name("bastion"), "RunInstances", "i",
            ImageId=self.default_ami,
            InstanceType="t3.micro",
            SubnetId=network.public_subnet_ids[0] if network.public_subnet_ids else "",
        )
        octets = hashlib.sha256(record["Id"].encode()).digest()[:2]
        return BastionHandles(
            instance_id=record["Id"], public_ip=f"203.0.{octets[0]}.{octets[1]}"
        )

    async def provision_workloads(
        self, identity: DeploymentIdentity, network: NetworkHandles, count: int
    ) -> WorkloadHandles:
        await self._pause()
        subnets = network.workload_subnet_ids or network.cc_subnet_ids
        ids, ips = [], []
        for i in range(count):
            subnet_id = subnets[i % len(subnets)]
            record = self._ensure(
                identity, "Instance", identity.resource_name(f"workload-{i + 1}"),
                "RunInstances", "i",
                ImageId=self.default_ami,
                InstanceType="t3.micro",
                SubnetId=subnet_id,
            )
            ids.append(record["Id"])
            subnet = self._by_id(subnet_id)
            cidr = ipaddress.ip_network(subnet["CidrBlock"]) if subnet else None
            ips.append(str(cidr[10 + i // len(subnets)]) if cidr else "")
        return WorkloadHandles(instance_ids=tuple(ids), private_ips=tuple(ips))

    async def provision_iam(self, identity: DeploymentIdentity) -> IamHandles:
        await self._pause()
        role = self._ensure(
            identity, "Role", identity.resource_name("ccvm-role"), "CreateRole", "AROA",
            AssumeRolePolicyDocument='{"Service": "ec2.amazonaws.com"}',
        )
        profile = self._ensure(
            identity, "InstanceProfile", identity.resource_name("ccvm-profile"),
            "CreateInstanceProfile", "AIPA", RoleName=role["Name"],
        )
        return IamHandles(instance_profile_id=profile["Id"], role_name=role["Name"])

    async def provision_security_groups(
        self, identity: DeploymentIdentity, network: NetworkHandles
    ) -> SecurityGroupHandles:
        await self._pause()
        mgmt = self._ensure(
            identity, "SecurityGroup", identity.resource_name("ccvm-mgmt-sg"),
            "CreateSecurityGroup", "sg", VpcId=network.vpc_id,
            Description="Connector management interface",
        )
        service = self._ensure(
            identity, "SecurityGroup", identity.resource_name("ccvm-service-sg"),
            "CreateSecurityGroup", "sg", VpcId=network.vpc_id,
            Description="Connector service interfaces",
        )
        return SecurityGroupHandles(management_sg_id=mgmt["Id"], service_sg_id=service["Id"])

    async def destroy_support(self, identity: DeploymentIdentity) -> int:
        await self._pause()
        return self._destroy(identity, ("Instance", "SecurityGroup", "InstanceProfile", "Role"))

    # ------------------------------------------------------------------
    # LoadBalancerPort
    # ------------------------------------------------------------------

    async def provision_load_balancer(
        self,
        identity: DeploymentIdentity,
        network: NetworkHandles,
        settings: LoadBalancerSettings,
    ) -> LoadBalancerHandles:
        await self._pause()
        lb_name = identity.resource_name("gwlb")
        tg_name = identity.resource_name("tg")
        hc = settings.health_check

        lb = self._ensure(
            identity, "LoadBalancer", lb_name, "CreateLoadBalancer", "gwy",
            Type="gateway",
            Subnets=list(network.cc_subnet_ids),
        )
        lb.setdefault(
            "Arn", self._arn("elasticloadbalancing", f"loadbalancer/gwy/{lb_name}/{lb['Id'][4:20]}")
        )
        lb_attributes = {"load_balancing.cross_zone.enabled": str(settings.cross_zone_enabled).lower()}
        if lb.get("Attributes") != lb_attributes:
            self._call("ModifyLoadBalancerAttributes", LoadBalancerArn=lb["Arn"], Attributes=lb_attributes)
            lb["Attributes"] = lb_attributes

        health_check = {
            "HealthCheckProtocol": "HTTP",
            "HealthCheckPort": str(hc.port),
            "HealthCheckPath": hc.path,
            "HealthCheckIntervalSeconds": hc.interval,
            "HealthyThresholdCount": hc.healthy_threshold,
            "UnhealthyThresholdCount": hc.unhealthy_threshold,
        }
        tg = self._ensure(
            identity, "TargetGroup", tg_name, "CreateTargetGroup", "tg",
            Protocol="GENEVE",
            Port=GENEVE_PORT,
            TargetType="ip",
            VpcId=network.vpc_id,
            **health_check,
        )
        tg.setdefault(
            "Arn", self._arn("elasticloadbalancing", f"targetgroup/{tg_name}/{tg['Id'][3:19]}")
        )
        if any(tg.get(k) != v for k, v in health_check.items()):
            self._call("ModifyTargetGroup", TargetGroupArn=tg["Arn"], **health_check)
            tg.update(health_check)

        tg_attributes = {
            "deregistration_delay.timeout_seconds": str(settings.deregistration_delay),
            "stickiness.enabled": str(settings.flow_stickiness != "5-tuple").lower(),
            "stickiness.type": _STICKINESS_TYPES[settings.flow_stickiness],
            "target_failover.on_unhealthy": "rebalance" if settings.rebalance_flows else "no_rebalance",
        }
        if tg.get("Attributes") != tg_attributes:
            self._call("ModifyTargetGroupAttributes", TargetGroupArn=tg["Arn"], Attributes=tg_attributes)
            tg["Attributes"] = tg_attributes

        self._ensure(
            identity, "Listener", identity.resource_name("gwlb-listener"), "CreateListener", "lsnr",
            LoadBalancerArn=lb["Arn"],
            DefaultActions=[{"Type": "forward", "TargetGroupArn": tg["Arn"]}],
        )
        self._targets.setdefault(tg["Arn"], [])
        return LoadBalancerHandles(gwlb_arn=lb["Arn"], target_group_arn=tg["Arn"])

    def _require_target_group(self, target_group_arn: str) -> list[dict[str, Any]]:
        if target_group_arn not in self._targets:
            raise LookupError(f"TargetGroupNotFound: {target_group_arn}")
        return self._targets[target_group_arn]

    async def register_targets(
        self, target_group_arn: str, registrations: Sequence[TargetRegistration]
    ) -> None:
        await self._pause()
        targets = self._require_target_group(target_group_arn)
        payload = [{"Id": r.address, "Port": GENEVE_PORT} for r in registrations]
        self._call("RegisterTargets", TargetGroupArn=target_group_arn, Targets=payload)
        for r in registrations:
            entry = {"Id": r.address, "Port": GENEVE_PORT, "Slot": r.slot_index}
            if entry not in targets:
                targets.append(entry)

    async def deregister_targets(
        self, target_group_arn: str, registrations: Sequence[TargetRegistration]
    ) -> None:
        await self._pause()
        payload = [{"Id": r.address, "Port": GENEVE_PORT} for r in registrations]
        self._call("DeregisterTargets", TargetGroupArn=target_group_arn, Targets=payload)
        # Deregistering from a group that is already gone is a no-op.
        targets = self._targets.get(target_group_arn, [])
        doomed = {(r.address, r.slot_index) for r in registrations}
        targets[:] = [t for t in targets if (t["Id"], t["Slot"]) not in doomed]

    async def describe_targets(self, target_group_arn: str) -> list[TargetRegistration]:
        return [
            TargetRegistration(target_group_arn, t["Id"], t["Slot"])
            for t in self._targets.get(target_group_arn, [])
        ]

    async def destroy_load_balancer(self, identity: DeploymentIdentity) -> int:
        await self._pause()
        for record in self.resources("TargetGroup"):
            if record["DeploymentSuffix"] == identity.suffix:
                self._targets.pop(record.get("Arn", ""), None)
        return self._destroy(identity, ("Listener", "TargetGroup", "LoadBalancer"))

    # ------------------------------------------------------------------
    # FleetPort
    # ------------------------------------------------------------------

    def _drift(self, record: dict[str, Any], desired: dict[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in desired.items() if record.get(k) != v}

    async def provision_fleet(self, spec: FleetSpec) -> FleetHandles:
        await self._pause()
        identity = _identity_from_spec(spec)
        # One management interface plus one per service interface.
        interfaces = [
            {"DeviceIndex": i, "Groups": [spec.security_group_ids[0 if i == 0 else -1]]}
            for i in range(spec.size_class.interface_count + 1)
        ]
        template_data = {
            "ImageId": self.default_ami,
            "InstanceType": spec.instance_type,
            "IamInstanceProfile": {"Name": spec.instance_profile_id},
            "NetworkInterfaces": interfaces,
            "UserData": spec.bootstrap.encoded(),
        }
        template = self._ensure(
            identity, "LaunchTemplate", f"{spec.name}-lt", "CreateLaunchTemplate", "lt",
            LatestVersionNumber=1,
            **template_data,
        )
        template_changes = self._drift(template, template_data)
        if template_changes:
            self._call(
                "CreateLaunchTemplateVersion",
                LaunchTemplateId=template["Id"],
                SourceVersion=str(template["LatestVersionNumber"]),
                LaunchTemplateData=template_changes,
            )
            template.update(template_changes)
            template["LatestVersionNumber"] += 1
            logger.info(
                "Launch template %s moved to version %d (%s)",
                template["Name"],
                template["LatestVersionNumber"],
                ", ".join(sorted(template_changes)),
            )

        if spec.scaling.zonal_asg_enabled:
            groups = [
                (f"{spec.name}-asg-{i}", [subnet])
                for i, subnet in enumerate(spec.subnet_ids, start=1)
            ]
        else:
            groups = [(f"{spec.name}-asg", list(spec.subnet_ids))]

        policy = {
            "PolicyType": "TargetTrackingScaling",
            "TargetTrackingConfiguration": {
                "PredefinedMetricSpecification": {
                    "PredefinedMetricType": "ASGAverageCPUUtilization"
                },
                "TargetValue": float(spec.scaling.target_cpu_utilization),
            },
        }
        names = []
        for name, subnets in groups:
            existed = name in self._resources
            group_settings = {
                "MinSize": spec.scaling.min_size,
                "MaxSize": spec.scaling.max_size,
                "HealthCheckGracePeriod": spec.scaling.health_check_grace_period,
                "VPCZoneIdentifier": ",".join(subnets),
            }
            group = self._ensure(
                identity, "AutoScalingGroup", name, "CreateAutoScalingGroup", "asg",
                LaunchTemplate={"LaunchTemplateId": template["Id"], "Version": "$Latest"},
                TargetGroupARNs=[spec.target_group_arn],
                **group_settings,
            )
            group_changes = self._drift(group, group_settings)
            if group_changes:
                self._call("UpdateAutoScalingGroup", AutoScalingGroupName=name, **group_changes)
                group.update(group_changes)
            if existed and template_changes:
                self._call(
                    "StartInstanceRefresh",
                    AutoScalingGroupName=name,
                    Strategy="Rolling",
                    DesiredConfiguration={
                        "LaunchTemplate": {
                            "LaunchTemplateId": template["Id"],
                            "Version": str(template["LatestVersionNumber"]),
                        }
                    },
                )

            scaling = self._ensure(
                identity, "ScalingPolicy", f"{name}-cpu-policy", "PutScalingPolicy", "pol",
                AutoScalingGroupName=name,
                **policy,
            )
            policy_changes = self._drift(scaling, policy)
            if policy_changes:
                self._call("PutScalingPolicy", AutoScalingGroupName=name, **policy)
                scaling.update(policy_changes)

            pool_name = f"{name}-warm-pool"
            if spec.scaling.warm_pool_enabled:
                self._ensure(
                    identity, "WarmPool", pool_name, "PutWarmPool", "wp",
                    AutoScalingGroupName=name, PoolState="Stopped",
                )
            elif pool_name in self._resources:
                self._call("DeleteWarmPool", AutoScalingGroupName=name)
                del self._resources[pool_name]
            names.append(name)

        logger.info("Fleet %s ready with %d autoscaling group(s)", spec.name, len(names))
        return FleetHandles(asg_names=tuple(names), launch_template_id=template["Id"])

    async def destroy_fleet(self, identity: DeploymentIdentity) -> int:
        await self._pause()
        return self._destroy(
            identity, ("WarmPool", "ScalingPolicy", "AutoScalingGroup", "LaunchTemplate")
        )

    # ------------------------------------------------------------------
    # EndpointPort / DnsPort
    # ------------------------------------------------------------------

    async def publish_endpoints(
        self,
        identity: DeploymentIdentity,
        network: NetworkHandles,
        load_balancer: LoadBalancerHandles,
        settings: EndpointSettings,
    ) -> EndpointHandles:
        await self._pause()
        service = self._ensure(
            identity, "VpcEndpointService", identity.resource_name("gwlb-service"),
            "CreateVpcEndpointServiceConfiguration", "vpce-svc",
            GatewayLoadBalancerArns=[load_balancer.gwlb_arn],
            AcceptanceRequired=settings.acceptance_required,
        )
        service_name = f"com.amazonaws.vpce.{self.region}.{service['Id']}"
        principals = sorted(settings.allowed_principals)
        if principals and service.get("AllowedPrincipals") != principals:
            self._call(
                "ModifyVpcEndpointServicePermissions",
                ServiceId=service["Id"],
                AddAllowedPrincipals=principals,
            )
            service["AllowedPrincipals"] = principals

        endpoint_ids = []
        for i, subnet_id in enumerate(network.cc_subnet_ids, start=1):
            endpoint = self._ensure(
                identity, "VpcEndpoint", identity.resource_name(f"gwlb-endpoint-{i}"),
                "CreateVpcEndpoint", "vpce",
                VpcEndpointType="GatewayLoadBalancer",
                ServiceName=service_name,
                VpcId=network.vpc_id,
                SubnetIds=[subnet_id],
            )
            endpoint_ids.append(endpoint["Id"])
        return EndpointHandles(service_name=service_name, endpoint_ids=tuple(endpoint_ids))

    async def destroy_endpoints(self, identity: DeploymentIdentity) -> int:
        await self._pause()
        return self._destroy(identity, ("VpcEndpoint", "VpcEndpointService"))

    async def provision_resolver_rules(
        self,
        identity: DeploymentIdentity,
        network: NetworkHandles,
        endpoints: EndpointHandles,
        settings: DnsSettings,
    ) -> DnsHandles:
        await self._pause()
        if not settings.domain_names:
            return DnsHandles()

        resolver = self._ensure(
            identity, "ResolverEndpoint", identity.resource_name("r53-outbound"),
            "CreateResolverEndpoint", "rslvr-out",
            Direction="OUTBOUND",
            IpAddresses=[{"SubnetId": s} for s in network.cc_subnet_ids],
        )
        rule_ids = []
        for i, domain in enumerate(settings.domain_names, start=1):
            rule = self._ensure(
                identity, "ResolverRule", identity.resource_name(f"r53-rule-{i}"),
                "CreateResolverRule", "rslvr-rr",
                DomainName=domain,
                RuleType="FORWARD",
                ResolverEndpointId=resolver["Id"],
                TargetService=endpoints.service_name,
            )
            self._ensure(
                identity, "ResolverRuleAssociation",
                identity.resource_name(f"r53-rule-assoc-{i}"),
                "AssociateResolverRule", "rslvr-rrassoc",
                ResolverRuleId=rule["Id"],
                VPCId=network.vpc_id,
            )
            rule_ids.append(rule["Id"])
        return DnsHandles(rule_ids=tuple(rule_ids))

    async def destroy_resolver_rules(self, identity: DeploymentIdentity) -> int:
        await self._pause()
        return self._destroy(
            identity, ("ResolverRuleAssociation", "ResolverRule", "ResolverEndpoint")
        )


def _identity_from_spec(spec: FleetSpec) -> DeploymentIdentity:
    """Recover the owning identity from a fleet name ({prefix}-ccvm-{suffix})."""
    prefix, _, suffix = spec.name.rpartition("-ccvm-")
    return DeploymentIdentity(name_prefix=prefix, suffix=suffix, tags=spec.tags)
