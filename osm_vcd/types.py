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
XML types of the vCloud Director API (schema v1.5 and later).

Each ``*Type`` class decodes a response element with ``from_xml`` and the
sections that are sent back to the server also encode with ``to_xml``.
"""

from copy import deepcopy

from lxml import etree as lxmlElementTree

from osm_vcd.errors import VcdUnexpectedResponse

NSMAP = {'vcloud': 'http://www.vmware.com/vcloud/v1.5',
         'ovf': 'http://schemas.dmtf.org/ovf/envelope/1',
         'xsi': 'http://www.w3.org/2001/XMLSchema-instance',
         'rasd': 'http://schemas.dmtf.org/wbem/wscim/1/cim-schema/2/CIM_ResourceAllocationSettingData',
         'vssd': 'http://schemas.dmtf.org/wbem/wscim/1/cim-schema/2/CIM_VirtualSystemSettingData',
         'vmw': 'http://www.vmware.com/schema/ovf',
         'vmext': 'http://www.vmware.com/vcloud/extension/v1.5'}

# namespace declarations of request bodies, vcloud being the default one
REQUEST_NSMAP = {None: NSMAP['vcloud'],
                 'ovf': NSMAP['ovf'],
                 'xsi': NSMAP['xsi']}

MIME_VDC = 'application/vnd.vmware.vcloud.vdc+xml'
MIME_VAPP = 'application/vnd.vmware.vcloud.vApp+xml'
MIME_VAPP_TEMPLATE = 'application/vnd.vmware.vcloud.vAppTemplate+xml'
MIME_VM = 'application/vnd.vmware.vcloud.vm+xml'
MIME_TASK = 'application/vnd.vmware.vcloud.task+xml'
MIME_ORG_VDC_NETWORK = 'application/vnd.vmware.vcloud.orgVdcNetwork+xml'
MIME_RECOMPOSE_VAPP_PARAMS = 'application/vnd.vmware.vcloud.recomposeVAppParams+xml'
MIME_DEPLOY_VAPP_PARAMS = 'application/vnd.vmware.vcloud.deployVAppParams+xml'
MIME_UNDEPLOY_VAPP_PARAMS = 'application/vnd.vmware.vcloud.undeployVAppParams+xml'
MIME_GUEST_CUSTOMIZATION_SECTION = 'application/vnd.vmware.vcloud.guestCustomizationSection+xml'
MIME_NETWORK_CONNECTION_SECTION = 'application/vnd.vmware.vcloud.networkConnectionSection+xml'
MIME_NETWORK_CONFIG_SECTION = 'application/vnd.vmware.vcloud.networkConfigSection+xml'
MIME_RASD_ITEM = 'application/vnd.vmware.vcloud.rasdItem+xml'
MIME_PRODUCT_SECTIONS = 'application/vnd.vmware.vcloud.productSections+xml'
MIME_METADATA = 'application/vnd.vmware.vcloud.metadata+xml'
MIME_METADATA_VALUE = 'application/vnd.vmware.vcloud.metadata.value+xml'
MIME_VDC_STORAGE_PROFILE = 'application/vnd.vmware.vcloud.vdcStorageProfile+xml'

# mapping of vCD vApp status codes
VAPP_STATUSES = {-1: 'FAILED_CREATION',
                 0: 'UNRESOLVED',
                 1: 'RESOLVED',
                 2: 'DEPLOYED',
                 3: 'SUSPENDED',
                 4: 'POWERED_ON',
                 5: 'WAITING_FOR_INPUT',
                 6: 'UNKNOWN',
                 7: 'UNRECOGNIZED',
                 8: 'POWERED_OFF',
                 9: 'INCONSISTENT_STATE',
                 10: 'MIXED',
                 11: 'DESCRIPTOR_PENDING',
                 12: 'COPYING_CONTENTS',
                 13: 'DISK_CONTENTS_PENDING',
                 14: 'QUARANTINED',
                 15: 'QUARANTINE_EXPIRED',
                 16: 'REJECTED',
                 17: 'TRANSFER_TIMEOUT',
                 18: 'VAPP_UNDEPLOYED',
                 19: 'VAPP_PARTIALLY_DEPLOYED'}

# template status meaning "resolved and powered off"
TEMPLATE_STATUS_READY = 8


def vcd_tag(name):
    return '{%s}%s' % (NSMAP['vcloud'], name)


def ovf_tag(name):
    return '{%s}%s' % (NSMAP['ovf'], name)


def xsi_tag(name):
    return '{%s}%s' % (NSMAP['xsi'], name)


def parse_xml(content):
    """Parse a response body into an lxml element.

    Raises:
        VcdUnexpectedResponse: the body is not well formed XML.
    """
    if isinstance(content, str):
        content = content.encode('utf-8')
    parser = lxmlElementTree.XMLParser(resolve_entities=False, remove_blank_text=True)
    try:
        return lxmlElementTree.fromstring(content, parser)
    except lxmlElementTree.XMLSyntaxError as exp:
        raise VcdUnexpectedResponse("Failed to parse XML response: {}".format(exp))


def to_xml_string(element):
    return lxmlElementTree.tostring(element, encoding='UTF-8', method='xml',
                                    xml_declaration=True, pretty_print=True)


def _text(element, path):
    child = element.find(path, NSMAP)
    if child is None or child.text is None:
        return None
    return child.text.strip()


def _int(value, default=None):
    if value is None or value == '':
        return default
    return int(value)


def _bool(value):
    if value is None:
        return None
    return value.strip().lower() == 'true'


def _bool_text(value):
    return 'true' if value else 'false'


def _sub(parent, tag, text=None):
    child = lxmlElementTree.SubElement(parent, tag)
    if text is not None:
        child.text = str(text)
    return child


# child order of the elements rebuilt from a decoded copy
NETWORK_CONFIG_CHILDREN = ('Link', 'Description', 'Configuration', 'IsDeployed')
CONFIGURATION_CHILDREN = ('BackwardCompatibilityMode', 'IpScopes', 'ParentNetwork', 'FenceMode',
                          'RetainNetInfoAcrossDeployments', 'Features', 'SyslogServerSettings',
                          'RouterInfo', 'SubInterface', 'DistributedInterface', 'GuestVlanAllowed')
FEATURES_CHILDREN = ('DhcpService', 'FirewallService', 'NatService', 'IpsecVpnService',
                     'DhcpRelayService', 'StaticRoutingService')
IP_SCOPE_CHILDREN = ('IsInherited', 'Gateway', 'Netmask', 'SubnetPrefixLength', 'Dns1', 'Dns2',
                     'DnsSuffix', 'IsEnabled', 'IpRanges', 'AllocatedIpAddresses', 'SubAllocations')
DHCP_SERVICE_CHILDREN = ('IsEnabled', 'DefaultLeaseTime', 'MaxLeaseTime', 'IpRange', 'RouterIp',
                         'SubMask', 'PrimaryNameServer', 'SecondaryNameServer', 'DomainName')


def _local_name(element):
    return lxmlElementTree.QName(element).localname


def _merge_unmodeled(element, original, order, modeled):
    """Add to ``element`` the children of ``original`` it does not model.

    ``element`` holds the freshly rendered children whose local names are in
    ``modeled``; the ones of ``original`` with those names are dropped. The
    result follows ``order``, names missing from it go last.
    """
    current = {}
    for child in element:
        current.setdefault(_local_name(child), []).append(child)
    kept = {}
    unknown = []
    for child in original:
        if not isinstance(child.tag, str):
            continue
        name = _local_name(child)
        if name in modeled:
            continue
        if name in order:
            kept.setdefault(name, []).append(deepcopy(child))
        else:
            unknown.append(deepcopy(child))
    for name, value in original.attrib.items():
        if name not in element.attrib:
            element.set(name, value)
    # appending an existing child moves it to the end
    for name in order:
        for child in current.pop(name, []) + kept.get(name, []):
            element.append(child)
    for children in current.values():
        for child in children:
            element.append(child)
    for child in unknown:
        element.append(child)
    return element


class Link(object):

    def __init__(self, rel=None, href=None, type=None, name=None):
        self.rel = rel
        self.href = href
        self.type = type
        self.name = name

    @classmethod
    def from_xml(cls, element):
        return cls(rel=element.get('rel'), href=element.get('href'),
                   type=element.get('type'), name=element.get('name'))

    def to_xml(self, parent, tag=None):
        link = lxmlElementTree.SubElement(parent, tag or vcd_tag('Link'))
        for attr in ('href', 'rel', 'type', 'name'):
            if getattr(self, attr):
                link.set(attr, getattr(self, attr))
        return link


class Reference(object):
    """A reference to another entity: href, name, type and id"""

    def __init__(self, href=None, name=None, type=None, id=None):
        self.href = href
        self.name = name
        self.type = type
        self.id = id

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        return cls(href=element.get('href'), name=element.get('name'),
                   type=element.get('type'), id=element.get('id'))

    def to_xml(self, parent, tag):
        ref = lxmlElementTree.SubElement(parent, tag)
        for attr in ('href', 'id', 'name', 'type'):
            if getattr(self, attr):
                ref.set(attr, getattr(self, attr))
        return ref


def _links(element):
    return [Link.from_xml(link) for link in element.iterfind('vcloud:Link', NSMAP)]


class TaskType(object):
    """Decoded ``Task`` element"""

    def __init__(self):
        self.href = None
        self.id = None
        self.name = None
        self.status = None
        self.operation = None
        self.operation_name = None
        self.start_time = None
        self.end_time = None
        self.progress = None
        self.owner = None
        self.error_message = None
        self.error_major_code = None
        self.error_minor_code = None
        self.links = []

    @classmethod
    def from_xml(cls, element):
        if element is None or element.tag != vcd_tag('Task'):
            raise VcdUnexpectedResponse("Expected a Task element, got {}".format(
                None if element is None else element.tag))
        task = cls()
        task.href = element.get('href')
        task.id = element.get('id')
        task.name = element.get('name')
        task.status = element.get('status')
        task.operation = element.get('operation')
        task.operation_name = element.get('operationName')
        task.start_time = element.get('startTime')
        task.end_time = element.get('endTime')
        task.progress = _int(_text(element, 'vcloud:Progress'))
        task.owner = Reference.from_xml(element.find('vcloud:Owner', NSMAP))
        error = element.find('vcloud:Error', NSMAP)
        if error is not None:
            task.error_message = error.get('message')
            task.error_major_code = error.get('majorErrorCode')
            task.error_minor_code = error.get('minorErrorCode')
        task.links = _links(element)
        return task


class NetworkConnection(object):
    """One NIC of a VM as described in a NetworkConnectionSection"""

    def __init__(self, network=None, network_connection_index=0, ip_address=None,
                 is_connected=True, mac_address=None, ip_address_allocation_mode=None,
                 network_adapter_type=None, external_ip_address=None):
        self.network = network
        self.network_connection_index = network_connection_index
        self.ip_address = ip_address
        self.external_ip_address = external_ip_address
        self.is_connected = is_connected
        self.mac_address = mac_address
        self.ip_address_allocation_mode = ip_address_allocation_mode
        self.network_adapter_type = network_adapter_type

    @classmethod
    def from_xml(cls, element):
        return cls(network=element.get('network'),
                   network_connection_index=_int(_text(element, 'vcloud:NetworkConnectionIndex'), 0),
                   ip_address=_text(element, 'vcloud:IpAddress'),
                   external_ip_address=_text(element, 'vcloud:ExternalIpAddress'),
                   is_connected=_bool(_text(element, 'vcloud:IsConnected')),
                   mac_address=_text(element, 'vcloud:MACAddress'),
                   ip_address_allocation_mode=_text(element, 'vcloud:IpAddressAllocationMode'),
                   network_adapter_type=_text(element, 'vcloud:NetworkAdapterType'))

    def to_xml(self, parent):
        conn = lxmlElementTree.SubElement(parent, vcd_tag('NetworkConnection'))
        if self.network is not None:
            conn.set('network', self.network)
        _sub(conn, vcd_tag('NetworkConnectionIndex'), self.network_connection_index)
        if self.ip_address:
            _sub(conn, vcd_tag('IpAddress'), self.ip_address)
        if self.external_ip_address:
            _sub(conn, vcd_tag('ExternalIpAddress'), self.external_ip_address)
        _sub(conn, vcd_tag('IsConnected'), _bool_text(self.is_connected))
        if self.mac_address:
            _sub(conn, vcd_tag('MACAddress'), self.mac_address)
        if self.ip_address_allocation_mode:
            _sub(conn, vcd_tag('IpAddressAllocationMode'), self.ip_address_allocation_mode)
        if self.network_adapter_type:
            _sub(conn, vcd_tag('NetworkAdapterType'), self.network_adapter_type)
        return conn


class NetworkConnectionSectionType(object):

    def __init__(self, href=None, type=None, info=None, primary_network_connection_index=None,
                 network_connections=None):
        self.href = href
        self.type = type
        self.info = info
        self.primary_network_connection_index = primary_network_connection_index
        self.network_connections = network_connections or []
        self.links = []

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        section = cls(href=element.get('href'), type=element.get('type'),
                      info=_text(element, 'ovf:Info'),
                      primary_network_connection_index=_int(
                          _text(element, 'vcloud:PrimaryNetworkConnectionIndex')))
        section.network_connections = [NetworkConnection.from_xml(conn) for conn in
                                       element.iterfind('vcloud:NetworkConnection', NSMAP)]
        section.links = _links(element)
        return section

    def to_xml(self, parent=None):
        if parent is None:
            section = lxmlElementTree.Element(vcd_tag('NetworkConnectionSection'), nsmap=REQUEST_NSMAP)
        else:
            section = lxmlElementTree.SubElement(parent, vcd_tag('NetworkConnectionSection'))
        if self.href:
            section.set('href', self.href)
        if self.type:
            section.set('type', self.type)
        _sub(section, ovf_tag('Info'), self.info or '')
        if self.primary_network_connection_index is not None:
            _sub(section, vcd_tag('PrimaryNetworkConnectionIndex'), self.primary_network_connection_index)
        for conn in self.network_connections:
            conn.to_xml(section)
        return section


class IPRange(object):

    def __init__(self, start_address=None, end_address=None):
        self.start_address = start_address
        self.end_address = end_address

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        return cls(start_address=_text(element, 'vcloud:StartAddress'),
                   end_address=_text(element, 'vcloud:EndAddress'))

    def to_xml(self, parent, tag=None):
        ip_range = lxmlElementTree.SubElement(parent, tag or vcd_tag('IpRange'))
        _sub(ip_range, vcd_tag('StartAddress'), self.start_address)
        _sub(ip_range, vcd_tag('EndAddress'), self.end_address)
        return ip_range


class IPScope(object):

    def __init__(self, is_inherited=False, gateway=None, netmask=None, dns1=None, dns2=None,
                 dns_suffix=None, is_enabled=True, ip_ranges=None):
        self.is_inherited = is_inherited
        self.gateway = gateway
        self.netmask = netmask
        self.dns1 = dns1
        self.dns2 = dns2
        self.dns_suffix = dns_suffix
        self.is_enabled = is_enabled
        self.ip_ranges = ip_ranges or []
        self._element = None

    @classmethod
    def from_xml(cls, element):
        scope = cls(is_inherited=_bool(_text(element, 'vcloud:IsInherited')),
                    gateway=_text(element, 'vcloud:Gateway'),
                    netmask=_text(element, 'vcloud:Netmask'),
                    dns1=_text(element, 'vcloud:Dns1'),
                    dns2=_text(element, 'vcloud:Dns2'),
                    dns_suffix=_text(element, 'vcloud:DnsSuffix'),
                    is_enabled=_bool(_text(element, 'vcloud:IsEnabled')),
                    ip_ranges=[IPRange.from_xml(ip_range) for ip_range in
                               element.iterfind('vcloud:IpRanges/vcloud:IpRange', NSMAP)])
        scope._element = deepcopy(element)
        return scope

    def to_xml(self, parent):
        scope = lxmlElementTree.SubElement(parent, vcd_tag('IpScope'))
        _sub(scope, vcd_tag('IsInherited'), _bool_text(self.is_inherited))
        for tag, value in (('Gateway', self.gateway), ('Netmask', self.netmask),
                           ('Dns1', self.dns1), ('Dns2', self.dns2),
                           ('DnsSuffix', self.dns_suffix)):
            if value:
                _sub(scope, vcd_tag(tag), value)
        _sub(scope, vcd_tag('IsEnabled'), _bool_text(self.is_enabled))
        if self.ip_ranges:
            ranges = _sub(scope, vcd_tag('IpRanges'))
            for ip_range in self.ip_ranges:
                ip_range.to_xml(ranges)
        if self._element is not None:
            _merge_unmodeled(scope, self._element, IP_SCOPE_CHILDREN,
                             ('IsInherited', 'Gateway', 'Netmask', 'Dns1', 'Dns2', 'DnsSuffix',
                              'IsEnabled', 'IpRanges'))
        return scope


class DhcpService(object):

    def __init__(self, is_enabled=False, default_lease_time=None, max_lease_time=None, ip_range=None):
        self.is_enabled = is_enabled
        self.default_lease_time = default_lease_time
        self.max_lease_time = max_lease_time
        self.ip_range = ip_range
        self._element = None

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        dhcp = cls(is_enabled=_bool(_text(element, 'vcloud:IsEnabled')),
                   default_lease_time=_int(_text(element, 'vcloud:DefaultLeaseTime')),
                   max_lease_time=_int(_text(element, 'vcloud:MaxLeaseTime')),
                   ip_range=IPRange.from_xml(element.find('vcloud:IpRange', NSMAP)))
        dhcp._element = deepcopy(element)
        return dhcp

    def to_xml(self, parent):
        dhcp = lxmlElementTree.SubElement(parent, vcd_tag('DhcpService'))
        _sub(dhcp, vcd_tag('IsEnabled'), _bool_text(self.is_enabled))
        _sub(dhcp, vcd_tag('DefaultLeaseTime'), self.default_lease_time or 0)
        _sub(dhcp, vcd_tag('MaxLeaseTime'), self.max_lease_time or 0)
        if self.ip_range is not None:
            self.ip_range.to_xml(dhcp)
        if self._element is not None:
            _merge_unmodeled(dhcp, self._element, DHCP_SERVICE_CHILDREN,
                             ('IsEnabled', 'DefaultLeaseTime', 'MaxLeaseTime', 'IpRange'))
        return dhcp


class NetworkConfiguration(object):
    """``Configuration`` of a vApp network"""

    def __init__(self, ip_scopes=None, parent_network=None, fence_mode=None,
                 dhcp_service=None, guest_vlan_allowed=None):
        self.ip_scopes = ip_scopes or []
        self.parent_network = parent_network
        self.fence_mode = fence_mode
        self.dhcp_service = dhcp_service
        self.guest_vlan_allowed = guest_vlan_allowed
        self._element = None

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        configuration = cls(ip_scopes=[IPScope.from_xml(scope) for scope in
                                       element.iterfind('vcloud:IpScopes/vcloud:IpScope', NSMAP)],
                            parent_network=Reference.from_xml(element.find('vcloud:ParentNetwork', NSMAP)),
                            fence_mode=_text(element, 'vcloud:FenceMode'),
                            dhcp_service=DhcpService.from_xml(
                                element.find('vcloud:Features/vcloud:DhcpService', NSMAP)),
                            guest_vlan_allowed=_bool(_text(element, 'vcloud:GuestVlanAllowed')))
        configuration._element = deepcopy(element)
        return configuration

    def to_xml(self, parent):
        configuration = lxmlElementTree.SubElement(parent, vcd_tag('Configuration'))
        if self.ip_scopes:
            scopes = _sub(configuration, vcd_tag('IpScopes'))
            for scope in self.ip_scopes:
                scope.to_xml(scopes)
        if self.parent_network is not None:
            self.parent_network.to_xml(configuration, vcd_tag('ParentNetwork'))
        _sub(configuration, vcd_tag('FenceMode'), self.fence_mode)
        features = _sub(configuration, vcd_tag('Features'))
        if self.dhcp_service is not None:
            self.dhcp_service.to_xml(features)
        if self._element is not None:
            # NAT, firewall and the other services are only carried over
            original_features = self._element.find('vcloud:Features', NSMAP)
            if original_features is not None:
                _merge_unmodeled(features, original_features, FEATURES_CHILDREN, ('DhcpService',))
        if len(features) == 0:
            configuration.remove(features)
        if self.guest_vlan_allowed is not None:
            _sub(configuration, vcd_tag('GuestVlanAllowed'), _bool_text(self.guest_vlan_allowed))
        if self._element is not None:
            _merge_unmodeled(configuration, self._element, CONFIGURATION_CHILDREN,
                             ('IpScopes', 'ParentNetwork', 'FenceMode', 'Features', 'GuestVlanAllowed'))
        return configuration


class VAppNetworkConfiguration(object):
    """``NetworkConfig`` entry of a NetworkConfigSection.

    The modeled fields are always rendered from the attributes. Entries
    decoded from the server also carry over what is not modeled here
    (NAT, firewall, router info...) so it survives an update.
    """

    def __init__(self, network_name=None, description=None, configuration=None, is_deployed=False):
        self.network_name = network_name
        self.description = description
        self.configuration = configuration
        self.is_deployed = is_deployed
        self._element = None

    @classmethod
    def from_xml(cls, element):
        config = cls(network_name=element.get('networkName'),
                     description=_text(element, 'vcloud:Description'),
                     configuration=NetworkConfiguration.from_xml(element.find('vcloud:Configuration', NSMAP)),
                     is_deployed=_bool(_text(element, 'vcloud:IsDeployed')))
        config._element = deepcopy(element)
        return config

    def to_xml(self, parent):
        network_config = lxmlElementTree.SubElement(parent, vcd_tag('NetworkConfig'))
        network_config.set('networkName', self.network_name)
        if self.description:
            _sub(network_config, vcd_tag('Description'), self.description)
        if self.configuration is not None:
            self.configuration.to_xml(network_config)
        _sub(network_config, vcd_tag('IsDeployed'), _bool_text(self.is_deployed))
        if self._element is not None:
            _merge_unmodeled(network_config, self._element, NETWORK_CONFIG_CHILDREN,
                             ('Description', 'Configuration', 'IsDeployed'))
        return network_config


class NetworkConfigSectionType(object):

    def __init__(self, href=None, type=MIME_NETWORK_CONFIG_SECTION,
                 info='Configuration parameters for logical networks', network_configs=None):
        self.href = href
        self.type = type
        self.info = info
        self.network_configs = network_configs or []
        self.links = []

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        section = cls(href=element.get('href'), type=element.get('type'),
                      info=_text(element, 'ovf:Info'))
        section.network_configs = [VAppNetworkConfiguration.from_xml(config) for config in
                                   element.iterfind('vcloud:NetworkConfig', NSMAP)]
        section.links = _links(element)
        return section

    def network_names(self):
        return [config.network_name for config in self.network_configs]

    def to_xml(self):
        section = lxmlElementTree.Element(vcd_tag('NetworkConfigSection'), nsmap=REQUEST_NSMAP)
        if self.type:
            section.set('type', self.type)
        _sub(section, ovf_tag('Info'), self.info or '')
        for config in self.network_configs:
            config.to_xml(section)
        return section


class OvfProperty(object):

    def __init__(self, key=None, type=None, value=None, default_value=None,
                 user_configurable=False, label=None, description=None):
        self.key = key
        self.type = type
        self.value = value
        self.default_value = default_value
        self.user_configurable = user_configurable
        self.label = label
        self.description = description

    @classmethod
    def from_xml(cls, element):
        value = element.find('ovf:Value', NSMAP)
        return cls(key=element.get(ovf_tag('key')),
                   type=element.get(ovf_tag('type')),
                   value=value.get(ovf_tag('value')) if value is not None else None,
                   default_value=element.get(ovf_tag('value')),
                   user_configurable=_bool(element.get(ovf_tag('userConfigurable'))),
                   label=_text(element, 'ovf:Label'),
                   description=_text(element, 'ovf:Description'))

    def to_xml(self, parent):
        prop = lxmlElementTree.SubElement(parent, ovf_tag('Property'))
        prop.set(ovf_tag('key'), self.key)
        prop.set(ovf_tag('type'), self.type or 'string')
        prop.set(ovf_tag('userConfigurable'), _bool_text(self.user_configurable))
        if self.default_value is not None:
            prop.set(ovf_tag('value'), self.default_value)
        if self.label:
            _sub(prop, ovf_tag('Label'), self.label)
        if self.description:
            _sub(prop, ovf_tag('Description'), self.description)
        if self.value is not None:
            _sub(prop, ovf_tag('Value')).set(ovf_tag('value'), self.value)
        return prop


class ProductSectionType(object):
    """OVF ``ProductSection`` of a VM and its properties"""

    def __init__(self, info=None, properties=None):
        self.info = info
        self.properties = properties or []
        self._element = None

    @classmethod
    def from_xml(cls, element):
        if element is None:
            return None
        section = cls(info=_text(element, 'ovf:Info'),
                      properties=[OvfProperty.from_xml(prop) for prop in
                                  element.iterfind('ovf:Property', NSMAP)])
        section._element = deepcopy(element)
        return section

    def get_property(self, key):
        for prop in self.properties:
            if prop.key == key:
                return prop
        return None

    def to_xml(self, parent):
        if self._element is None:
            section = lxmlElementTree.SubElement(parent, ovf_tag('ProductSection'))
            _sub(section, ovf_tag('Info'), self.info or '')
            for prop in self.properties:
                prop.to_xml(section)
            return section

        section = deepcopy(self._element)
        parent.append(section)
        for prop_element in section.iterfind('ovf:Property', NSMAP):
            prop = self.get_property(prop_element.get(ovf_tag('key')))
            if prop is None or prop.value is None:
                continue
            for old_value in prop_element.findall('ovf:Value', NSMAP):
                prop_element.remove(old_value)
            _sub(prop_element, ovf_tag('Value')).set(ovf_tag('value'), prop.value)
        return section


class VmType(object):
    """Decoded ``Vm`` element"""

    def __init__(self):
        self.href = None
        self.id = None
        self.name = None
        self.status = None
        self.description = None
        self.network_connection_section = None
        self.product_section = None
        self.storage_profile = None
        self.links = []

    @classmethod
    def from_xml(cls, element):
        vm = cls()
        vm.href = element.get('href')
        vm.id = element.get('id')
        vm.name = element.get('name')
        vm.status = _int(element.get('status'))
        vm.description = _text(element, 'vcloud:Description')
        vm.network_connection_section = NetworkConnectionSectionType.from_xml(
            element.find('vcloud:NetworkConnectionSection', NSMAP))
        vm.product_section = ProductSectionType.from_xml(element.find('ovf:ProductSection', NSMAP))
        vm.storage_profile = Reference.from_xml(element.find('vcloud:StorageProfile', NSMAP))
        vm.links = _links(element)
        return vm


class VAppType(object):
    """Decoded ``VApp`` element"""

    def __init__(self):
        self.href = None
        self.id = None
        self.name = None
        self.type = None
        self.description = None
        self.status = None
        self.deployed = None
        self.links = []
        self.children = []
        self.tasks = []
        self.network_config_section = None

    @classmethod
    def from_xml(cls, element):
        if element is None or element.tag != vcd_tag('VApp'):
            raise VcdUnexpectedResponse("Expected a VApp element, got {}".format(
                None if element is None else element.tag))
        vapp = cls()
        vapp.href = element.get('href')
        vapp.id = element.get('id')
        vapp.name = element.get('name')
        vapp.type = element.get('type')
        vapp.status = _int(element.get('status'))
        vapp.deployed = _bool(element.get('deployed'))
        vapp.description = _text(element, 'vcloud:Description')
        vapp.links = _links(element)
        vapp.children = [VmType.from_xml(vm) for vm in element.iterfind('vcloud:Children/vcloud:Vm', NSMAP)]
        vapp.tasks = [TaskType.from_xml(task) for task in element.iterfind('vcloud:Tasks/vcloud:Task', NSMAP)]
        vapp.network_config_section = NetworkConfigSectionType.from_xml(
            element.find('vcloud:NetworkConfigSection', NSMAP))
        return vapp


class VAppTemplateType(object):
    """Decoded ``VAppTemplate`` element"""

    def __init__(self):
        self.href = None
        self.id = None
        self.name = None
        self.status = None
        self.children = []

    @classmethod
    def from_xml(cls, element):
        template = cls()
        template.href = element.get('href')
        template.id = element.get('id')
        template.name = element.get('name')
        template.status = _int(element.get('status'))
        template.children = [VmType.from_xml(vm) for vm in
                             element.iterfind('vcloud:Children/vcloud:Vm', NSMAP)]
        return template


class VdcType(object):
    """Decoded ``Vdc`` element"""

    def __init__(self):
        self.href = None
        self.id = None
        self.name = None
        self.links = []
        self.storage_profiles = []
        self.resource_entities = []

    @classmethod
    def from_xml(cls, element):
        vdc = cls()
        vdc.href = element.get('href')
        vdc.id = element.get('id')
        vdc.name = element.get('name')
        vdc.links = _links(element)
        vdc.storage_profiles = [Reference.from_xml(profile) for profile in
                                element.iterfind('vcloud:VdcStorageProfiles/vcloud:VdcStorageProfile', NSMAP)]
        vdc.resource_entities = [Reference.from_xml(entity) for entity in
                                 element.iterfind('vcloud:ResourceEntities/vcloud:ResourceEntity', NSMAP)]
        return vdc


class OrgVdcNetworkType(object):

    def __init__(self, name=None, href=None, id=None):
        self.name = name
        self.href = href
        self.id = id

    @classmethod
    def from_xml(cls, element):
        return cls(name=element.get('name'), href=element.get('href'), id=element.get('id'))


class MetadataEntry(object):

    def __init__(self, key=None, value=None, value_type=None, domain=None):
        self.key = key
        self.value = value
        self.value_type = value_type
        self.domain = domain

    @classmethod
    def from_xml(cls, element):
        typed_value = element.find('vcloud:TypedValue', NSMAP)
        value_type = None
        if typed_value is not None:
            value_type = typed_value.get(xsi_tag('type'))
        return cls(key=_text(element, 'vcloud:Key'),
                   value=_text(element, 'vcloud:TypedValue/vcloud:Value'),
                   value_type=value_type,
                   domain=_text(element, 'vcloud:Domain'))


class MetadataType(object):
    """Decoded ``Metadata`` element"""

    def __init__(self, href=None, entries=None):
        self.href = href
        self.entries = entries or []

    @classmethod
    def from_xml(cls, element):
        return cls(href=element.get('href'),
                   entries=[MetadataEntry.from_xml(entry) for entry in
                            element.iterfind('vcloud:MetadataEntry', NSMAP)])

    def get(self, key, default=None):
        for entry in self.entries:
            if entry.key == key:
                return entry.value
        return default

    def as_dict(self):
        return {entry.key: entry.value for entry in self.entries}
