"""Maps known failure messages from apply runs to diagnostic errors."""

from __future__ import annotations

import re
from dataclasses import dataclass

from kvprovider.diagnostics import DiagnosticError

_SOURCE = "Infrastructure Provider"


@dataclass(frozen=True)
class Condition:
    """A known failure: a pattern to look for and the diagnosis it implies."""

    pattern: re.Pattern
    reason: str
    message: str


# Specific matches first, generic matches last.
CONDITIONS: tuple[Condition, ...] = (
    Condition(
        re.compile(r"Error: Error creating Blob .*: Error copy/waiting"),
        "Timeout",
        "Copying the VHD to user environment was too slow, and timeout was reached for the success.",
    ),
    Condition(
        re.compile(
            r'Error: Error Creating/Updating Subnet .*: network.SubnetsClient#CreateOrUpdate: .* '
            r'Code="AnotherOperationInProgress" Message="Another operation on this or dependent resource is in progress'
        ),
        "AzureMultiOperationFailure",
        "Creating Subnets failed because Azure could not process multiple operations.",
    ),
    Condition(
        re.compile(
            r'Error: Error Creating/Updating Public IP .*: network.PublicIPAddressesClient#CreateOrUpdate: .* '
            r'Code="PublicIPCountLimitReached" Message="Cannot create more than .* public IP addresses '
            r"for this subscription in this region"
        ),
        "AzureQuotaLimitExceeded",
        "Service limits exceeded for Public IPs in the the subscriptions for the region. "
        "Requesting increase in quota should fix the error.",
    ),
    Condition(
        re.compile(
            r'Error: compute\.VirtualMachinesClient#CreateOrUpdate: .* Code="OperationNotAllowed" '
            r'Message="Operation could not be completed as it results in exceeding approved Total Regional Cores quota'
        ),
        "AzureQuotaLimitExceeded",
        "Service limits exceeded for Virtual Machine cores in the the subscriptions for the region. "
        "Requesting increase in quota should fix the error.",
    ),
    Condition(
        re.compile(r'Error: Code="OSProvisioningTimedOut"'),
        "AzureVirtualMachineFailure",
        "Some virtual machines failed to provision in alloted time. Virtual machines can fail to "
        "provision if the bootstap virtual machine has failing services.",
    ),
    Condition(
        re.compile(r'Status=404 Code="ResourceGroupNotFound"'),
        "AzureEventualConsistencyFailure",
        "Failed to find a resource that was recently created usualy caused by Azure's eventual "
        "consistency delays.",
    ),
    Condition(
        re.compile(r"Error: Error applying IAM policy to project .*: Too many conflicts"),
        "GCPTooManyIAMUpdatesInFlight",
        "There are a lot of IAM updates to the project in flight. Failed after reaching a limit of "
        "read-modify-write on conflict backoffs.",
    ),
    Condition(
        re.compile(r"Error: .*: googleapi: Error 503: .*, backendError"),
        "GCPBackendInternalError",
        "GCP is experiencing backend service interuptions. Please try again or contact Google Support",
    ),
    Condition(
        re.compile(r"Error: Error waiting for instance to create: Internal error"),
        "GCPComputeBackendTimeout",
        "GCP is experiencing backend service interuptions, the compute instance failed to create in "
        "reasonable time.",
    ),
    Condition(
        re.compile(r"Error: could not contact Ironic API: timeout reached"),
        "BaremetalIronicAPITimeout",
        "Unable to the reach provisioning service. This failure can be caused by incorrect "
        "network/proxy settings, inability to download the machine operating system images, or other "
        "misconfiguration. Please check access to the bootstrap host, and for any failing services.",
    ),
    Condition(
        re.compile(
            r"Error: could not inspect: could not inspect node, node is currently 'inspect failed', "
            r"last error was 'timeout reached while inspecting the node'"
        ),
        "BaremetalIronicInspectTimeout",
        "Timed out waiting for node inspection to complete. Please check the console on the host "
        "for more details.",
    ),
)


def diagnose_apply_error(err: BaseException | None) -> BaseException | None:
    """Return a DiagnosticError for a recognised failure, otherwise ``err`` itself."""
    if err is None:
        return None
    text = str(err)
    for condition in CONDITIONS:
        if condition.pattern.search(text):
            return DiagnosticError(condition.reason, condition.message, source=_SOURCE)
    return err