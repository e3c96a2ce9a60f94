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
Builders of the request bodies sent to vCloud Director.

All functions return an lxml element; use ``types.to_xml_string`` to
serialize it with the XML declaration.
"""

from lxml import etree as lxmlElementTree

from osm_vcd.types import NSMAP, REQUEST_NSMAP, MIME_GUEST_CUSTOMIZATION_SECTION, MIME_RASD_ITEM, \
    vcd_tag, ovf_tag, xsi_tag

# vcloud is the default namespace of the Item; the prefixed declaration
# qualifies its href and type attributes
RASD_NSMAP = {None: NSMAP['vcloud'],
              'rasd': NSMAP['rasd'],
              'vcloud': NSMAP['vcloud'],
              'xsi': NSMAP['xsi'],
              'vmw': NSMAP['vmw']}

# RASD resource types and instance ids of the virtual hardware section
CPU_RESOURCE_TYPE = 3
CPU_INSTANCE_ID = 4
MEMORY_RESOURCE_TYPE = 4
MEMORY_INSTANCE_ID = 5


def _sub(parent, tag, text=None):
    child = lxmlElementTree.SubElement(parent, tag)
    if text is not None:
        child.text = str(text)
    return child


def _bool_text(value):
    return 'true' if value else 'false'


def sourced_item(source_href, vm_name, network_connection_section=None, network_assignments=None,
                 needs_customization=True, hot_add=True):
    """Return the SourcedItem describing a VM taken from a template.

    Args:
        source_href: href of the template VM.
        vm_name: name of the new VM.
        network_connection_section: NetworkConnectionSectionType of the new VM.
        network_assignments: list of (inner_network, container_network) tuples.
        needs_customization: VM is customized on first power on.
        hot_add: enable memory and cpu hot add.
    """
    item = lxmlElementTree.Element(vcd_tag('SourcedItem'), nsmap=REQUEST_NSMAP)
    source = _sub(item, vcd_tag('Source'))
    source.set('href', source_href)
    source.set('name', vm_name)

    general = _sub(item, vcd_tag('VmGeneralParams'))
    _sub(general, vcd_tag('Name'), vm_name)
    _sub(general, vcd_tag('NeedsCustomization'), _bool_text(needs_customization))

    if network_connection_section is not None:
        instantiation = _sub(item, vcd_tag('InstantiationParams'))
        network_connection_section.to_xml(instantiation)

    for inner_network, container_network in network_assignments or []:
        assignment = _sub(item, vcd_tag('NetworkAssignment'))
        assignment.set('innerNetwork', inner_network)
        assignment.set('containerNetwork', container_network)

    if hot_add:
        capabilities = _sub(item, vcd_tag('VmCapabilities'))
        _sub(capabilities, vcd_tag('MemoryHotAddEnabled'), 'true')
        _sub(capabilities, vcd_tag('CpuHotAddEnabled'), 'true')
    return item


def recompose_vapp_params(name=None, description=None, sourced_items=None, accept_all_eulas=None,
                          delete_item_hrefs=None):
    """Return RecomposeVAppParams adding and/or deleting VMs of a vApp"""
    params = lxmlElementTree.Element(vcd_tag('RecomposeVAppParams'), nsmap=REQUEST_NSMAP)
    if name:
        params.set('name', name)
    params.set('deploy', 'false')
    params.set('powerOn', 'false')
    if description:
        _sub(params, vcd_tag('Description'), description)
    for item in sourced_items or []:
        params.append(item)
    if accept_all_eulas is not None:
        _sub(params, vcd_tag('AllEULAsAccepted'), _bool_text(accept_all_eulas))
    for href in delete_item_hrefs or []:
        _sub(params, vcd_tag('DeleteItem')).set('href', href)
    return params


def deploy_vapp_params(power_on=False):
    params = lxmlElementTree.Element(vcd_tag('DeployVAppParams'), nsmap={None: NSMAP['vcloud']})
    params.set('powerOn', _bool_text(power_on))
    return params


def undeploy_vapp_params(undeploy_power_action='powerOff'):
    params = lxmlElementTree.Element(vcd_tag('UndeployVAppParams'), nsmap={None: NSMAP['vcloud']})
    _sub(params, vcd_tag('UndeployPowerAction'), undeploy_power_action)
    return params


def guest_customization_section(vm_href, computer_name, script, change_sid=False):
    section = lxmlElementTree.Element(vcd_tag('GuestCustomizationSection'), nsmap=REQUEST_NSMAP)
    section.set('href', vm_href)
    section.set('type', MIME_GUEST_CUSTOMIZATION_SECTION)
    _sub(section, ovf_tag('Info'), 'Specifies Guest OS Customization Settings')
    _sub(section, vcd_tag('Enabled'), 'true')
    _sub(section, vcd_tag('ChangeSid'), _bool_text(change_sid))
    _sub(section, vcd_tag('CustomizationScript'), script)
    _sub(section, vcd_tag('ComputerName'), computer_name)
    return section


def _rasd_item(href, allocation_units, description, element_name, instance_id, resource_type,
               virtual_quantity, cores_per_socket=None):
    item = lxmlElementTree.Element(vcd_tag('Item'), nsmap=RASD_NSMAP)
    item.set('{%s}href' % NSMAP['vcloud'], href)
    item.set('{%s}type' % NSMAP['vcloud'], MIME_RASD_ITEM)

    rasd = '{%s}%%s' % NSMAP['rasd']
    _sub(item, rasd % 'AllocationUnits', allocation_units)
    _sub(item, rasd % 'Description', description)
    _sub(item, rasd % 'ElementName', element_name)
    _sub(item, rasd % 'InstanceID', instance_id)
    _sub(item, rasd % 'Reservation', 0)
    _sub(item, rasd % 'ResourceType', resource_type)
    _sub(item, rasd % 'VirtualQuantity', virtual_quantity)
    _sub(item, rasd % 'Weight', 0)
    if cores_per_socket is not None:
        _sub(item, '{%s}CoresPerSocket' % NSMAP['vmw'], cores_per_socket)

    link = _sub(item, vcd_tag('Link'))
    link.set('href', href)
    link.set('rel', 'edit')
    link.set('type', MIME_RASD_ITEM)
    return item


def cpu_item(vm_href, virtual_cpu_count, cores_per_socket=None):
    """RASD item setting the number of virtual logical processors.

    The socket count is virtual_cpu_count / cores_per_socket.
    """
    return _rasd_item(vm_href + '/virtualHardwareSection/cpu',
                      allocation_units='hertz * 10^6',
                      description='Number of Virtual CPUs',
                      element_name='{} virtual CPU(s)'.format(virtual_cpu_count),
                      instance_id=CPU_INSTANCE_ID,
                      resource_type=CPU_RESOURCE_TYPE,
                      virtual_quantity=virtual_cpu_count,
                      cores_per_socket=cores_per_socket)


def memory_item(vm_href, size_mb):
    return _rasd_item(vm_href + '/virtualHardwareSection/memory',
                      allocation_units='byte * 2^20',
                      description='Memory Size',
                      element_name='{} MB of memory'.format(size_mb),
                      instance_id=MEMORY_INSTANCE_ID,
                      resource_type=MEMORY_RESOURCE_TYPE,
                      virtual_quantity=size_mb)


def vm_params(name, storage_profile=None):
    """Return a ``Vm`` element used to rename a VM or move its storage profile"""
    vm = lxmlElementTree.Element(vcd_tag('Vm'), nsmap={None: NSMAP['vcloud']})
    vm.set('name', name)
    if storage_profile is not None:
        storage_profile.to_xml(vm, vcd_tag('StorageProfile'))
    return vm


def product_section_list(product_section):
    sections = lxmlElementTree.Element(vcd_tag('ProductSectionList'),
                                       nsmap={None: NSMAP['vcloud'], 'ovf': NSMAP['ovf']})
    product_section.to_xml(sections)
    return sections


def metadata_value(value, value_type='MetadataStringValue'):
    metadata = lxmlElementTree.Element(vcd_tag('MetadataValue'),
                                       nsmap={None: NSMAP['vcloud'], 'xsi': NSMAP['xsi']})
    typed_value = _sub(metadata, vcd_tag('TypedValue'))
    typed_value.set(xsi_tag('type'), value_type)
    _sub(typed_value, vcd_tag('Value'), value)
    return metadata
