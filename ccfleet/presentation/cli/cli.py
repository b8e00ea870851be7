"""
CLI Module

Architectural Intent:
- Command-line interface for ccfleet
- Entry point for all user interactions
- Delegates to application use cases via composition root
- Supports --verbose/--debug flags for log level control
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
import traceback

from ccfleet import composition_root
from ccfleet.application.dtos.deployment_dtos import ProvisionRequest
from ccfleet.application.use_cases.provision_deployment import validate_request
from ccfleet.domain.errors import ValidationError
from ccfleet.domain.services.config_validator import ConfigValidator
from ccfleet.infrastructure.config import load_config
from ccfleet.infrastructure.logging import configure_logging, parse_level


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ccfleet: connector fleets behind a gateway load balancer"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose output"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output with tracebacks"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit structured JSON logs"
    )
    parser.add_argument(
        "--config", "-c", default=None, help="Path to JSON config (default: ccfleet.json)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    for name, help_text in (
        ("validate", "Check the size class against the compute profile"),
        ("plan", "Show the provisioning plan and target registration delta"),
        ("apply", "Provision or converge the deployment"),
        ("destroy", "Tear down every resource of the deployment"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--name-prefix", "-n", default=None, help="Override identity.name_prefix"
        )
    return parser


def _request(config, name_prefix) -> ProvisionRequest:
    request = ProvisionRequest.from_config(config)
    if name_prefix:
        request = dataclasses.replace(request, name_prefix=name_prefix)
    return request


async def async_main(argv=None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)

    # Configure logging based on flags
    if args.debug:
        level = logging.DEBUG
    elif args.verbose:
        level = logging.INFO
    else:
        level = parse_level(config.log_level)
    configure_logging(level=level, json_format=args.json_logs)

    verbose = args.verbose or args.debug

    if not args.command:
        parser.print_help()
        return

    try:
        request = _request(config, args.name_prefix)
    except ValidationError as e:
        print(f"[-] Invalid configuration: {e}")
        sys.exit(1)

    if args.command == "validate":
        result = validate_request(ConfigValidator(), request)
        if result:
            print(f"[+] {request.size_class} / {request.compute_profile}: {result.message}")
        else:
            print(f"[-] {result.message}")
            sys.exit(1)
        return

    container = composition_root.create_container(config)
    try:
        if args.command == "plan":
            preview = await container.plan.execute(request)
            print(f"[*] Plan for {preview.deployment_name}")
            print(f"[*] Steps: {' -> '.join(preview.step_order)}")
            if not preview.validation:
                print(f"[-] Validation failed: {preview.validation.message}")
                print("[*] Fleet and target registrations would be skipped.")
            else:
                for reg in preview.registrations:
                    print(f"  - slot {reg.slot_index}: {reg.address} -> {reg.target_group_id}")
                print(f"[*] Delta: {preview.delta}")
            for warning in preview.warnings:
                print(f"[!] {warning}")
            return

        if args.command == "apply":
            print(f"[*] Provisioning {request.name_prefix}...")
            response = await container.provision.execute(request)
            for warning in response.warnings:
                print(f"[!] {warning}")
            if response.skipped_steps:
                print(f"[*] Skipped: {', '.join(response.skipped_steps)}")
            if response.success:
                outputs = response.outputs
                print(f"[+] {response.message}")
                print(f"[*] VPC: {outputs.vpc_id}")
                print(f"[*] Connector subnets: {', '.join(outputs.cc_subnet_ids)}")
                print(f"[*] Gateway load balancer: {outputs.gwlb_arn}")
                print(f"[*] Target group: {outputs.target_group_arn}")
                print(f"[*] Endpoint service: {outputs.endpoint_service_name}")
                print(f"[*] Registrations: {response.delta}")
            else:
                print(f"[-] {response.message}")
                sys.exit(1)
            return

        if args.command == "destroy":
            print(f"[*] Tearing down {request.name_prefix}...")
            if await container.teardown.execute(request.name_prefix):
                print("[+] Teardown Successful.")
            else:
                print("[-] Teardown Failed.")
                sys.exit(1)
            return
    except Exception as e:
        print(f"[-] {args.command.capitalize()} Failed: {e}")
        if verbose:
            traceback.print_exc()
        sys.exit(1)
    finally:
        container.close()


def main():
    asyncio.run(async_main())


if __name__ == "__main__":
    main()
