# -*- coding: utf-8 -*-

##
# Copyright 2019 VMware Inc.
# This file is part of ETSI OSM
# All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.
#
# For those usages not covered by the Apache License, Version 2.0 please
# contact:  osslegalrouting@vmware.com
##

"""
Settings of vApp networks and NIC address allocation.
"""

import netaddr

from osm_vcd.errors import VcdValidationError
from osm_vcd.types import DhcpService, IPScope, NetworkConfiguration, VAppNetworkConfiguration

FENCE_MODE_ISOLATED = 'isolated'
FENCE_MODE_BRIDGED = 'bridged'
FENCE_MODE_NAT_ROUTED = 'natRouted'

IP_ALLOCATION_DHCP = 'DHCP'
IP_ALLOCATION_POOL = 'POOL'
IP_ALLOCATION_MANUAL = 'MANUAL'
IP_ALLOCATION_NONE = 'NONE'


class DhcpSettings(object):
    """DHCP service of a vApp network"""

    def __init__(self, is_enabled=False, max_lease_time=0, default_lease_time=0, ip_range=None):
        self.is_enabled = is_enabled
        self.max_lease_time = max_lease_time
        self.default_lease_time = default_lease_time
        self.ip_range = ip_range


class VappNetworkSettings(object):
    """Information used to create a vApp network.

    Args:
        name: network name, unique in the vApp.
        gateway, netmask, dns1, dns2, dns_suffix: IP scope of the network.
        guest_vlan_allowed: allow guest VLAN tagging.
        static_ip_ranges: list of types.IPRange for the static pool.
        dhcp_settings: DhcpSettings or None to leave DHCP out.
    """

    def __init__(self, name=None, gateway=None, netmask=None, dns1=None, dns2=None, dns_suffix=None,
                 guest_vlan_allowed=None, static_ip_ranges=None, dhcp_settings=None):
        self.name = name
        self.gateway = gateway
        self.netmask = netmask
        self.dns1 = dns1
        self.dns2 = dns2
        self.dns_suffix = dns_suffix
        self.guest_vlan_allowed = guest_vlan_allowed
        self.static_ip_ranges = static_ip_ranges or []
        self.dhcp_settings = dhcp_settings


def is_valid_ip(address):
    if not address:
        return False
    return netaddr.valid_ipv4(address) or netaddr.valid_ipv6(address)


def validate_network_config_settings(network_settings):
    """Check the settings of a new vApp network.

    Raises:
        VcdValidationError: a mandatory field is missing or an address is invalid.
    """
    if not network_settings.name:
        raise VcdValidationError("network name is missing")

    if not network_settings.gateway:
        raise VcdValidationError("network gateway IP is missing")

    if not network_settings.netmask:
        raise VcdValidationError("network mask config is missing")

    dhcp_settings = network_settings.dhcp_settings
    if dhcp_settings is not None and dhcp_settings.ip_range is None:
        raise VcdValidationError("network DHCP ip range config is missing")

    if dhcp_settings is not None and not dhcp_settings.ip_range.start_address:
        raise VcdValidationError("network DHCP ip range start address is missing")

    if not is_valid_ip(network_settings.gateway):
        raise VcdValidationError("network gateway IP {} is not valid".format(network_settings.gateway))

    if not netaddr.valid_ipv4(network_settings.netmask) or \
            not netaddr.IPAddress(network_settings.netmask).is_netmask():
        raise VcdValidationError("network mask {} is not valid".format(network_settings.netmask))

    addresses = [network_settings.dns1, network_settings.dns2]
    for ip_range in network_settings.static_ip_ranges:
        addresses.extend([ip_range.start_address, ip_range.end_address])
    if dhcp_settings is not None:
        addresses.extend([dhcp_settings.ip_range.start_address, dhcp_settings.ip_range.end_address])
    for address in addresses:
        if address and not is_valid_ip(address):
            raise VcdValidationError("network address {} is not valid".format(address))


def isolated_network_configuration(network_settings):
    """Return the VAppNetworkConfiguration of a new isolated vApp network.

    A static or DHCP range with no end address is a single address range.
    """
    for ip_range in network_settings.static_ip_ranges:
        if not ip_range.end_address:
            ip_range.end_address = ip_range.start_address
    dhcp_service = None
    dhcp_settings = network_settings.dhcp_settings
    if dhcp_settings is not None:
        if not dhcp_settings.ip_range.end_address:
            dhcp_settings.ip_range.end_address = dhcp_settings.ip_range.start_address
        dhcp_service = DhcpService(is_enabled=dhcp_settings.is_enabled,
                                   default_lease_time=dhcp_settings.default_lease_time,
                                   max_lease_time=dhcp_settings.max_lease_time,
                                   ip_range=dhcp_settings.ip_range)

    ip_scope = IPScope(is_inherited=False,
                       gateway=network_settings.gateway,
                       netmask=network_settings.netmask,
                       dns1=network_settings.dns1,
                       dns2=network_settings.dns2,
                       dns_suffix=network_settings.dns_suffix,
                       is_enabled=True,
                       ip_ranges=network_settings.static_ip_ranges)

    return VAppNetworkConfiguration(
        network_name=network_settings.name,
        configuration=NetworkConfiguration(ip_scopes=[ip_scope],
                                           fence_mode=FENCE_MODE_ISOLATED,
                                           dhcp_service=dhcp_service,
                                           guest_vlan_allowed=network_settings.guest_vlan_allowed),
        is_deployed=False)


def ip_allocation_mode(network):
    """Return the (allocation mode, ip address) tuple of a VM NIC.

    Args:
        network: dict with keys ``ip`` and ``ip_allocation_mode``.
            ip may be 'dhcp', 'allocated', 'none', an IP address or empty;
            ip_allocation_mode is used verbatim when ip is empty.
    """
    ip = network.get('ip') or ''
    ip_address = 'Any'
    if ip == 'dhcp':
        mode = IP_ALLOCATION_DHCP
    elif ip == 'allocated':
        mode = IP_ALLOCATION_POOL
    elif ip == 'none':
        mode = IP_ALLOCATION_NONE
    elif ip != '':
        if is_valid_ip(ip):
            mode = IP_ALLOCATION_MANUAL
            ip_address = ip
        else:
            mode = IP_ALLOCATION_DHCP
    else:
        mode = network.get('ip_allocation_mode')
    return mode, ip_address
